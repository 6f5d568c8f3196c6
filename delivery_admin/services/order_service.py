import logging
from sqlalchemy import update
from delivery_admin.extensions import db
from delivery_admin.models.client import Client
from delivery_admin.models.driver_earning import DriverEarning
from delivery_admin.models.order import Order, OrderStatus
from delivery_admin.models.order_item import OrderItem
from delivery_admin.models.order_status_audit import OrderStatusAudit
from delivery_admin.models.scheduled_order import ScheduledOrder, ScheduledOrderStatus
from delivery_admin.services.errors import ServiceError, ValidationError, ConflictError
from delivery_admin.services.driver_service import DriverService
from delivery_admin.services.ledger_service import LedgerService
from delivery_admin.services.location_service import LocationService
from delivery_admin.services.pricing_service import PricingService
from delivery_admin.utils.search import filter_records

ORDER_SEARCH_FIELDS = ('id', 'location', 'status', 'client.full_name', 'driver.full_name')

ORDER_STATUSES = {status.value for status in OrderStatus}

# Order statuses a materialised scheduled order follows
MIRRORED_STATUSES = {
    ScheduledOrderStatus.NEW.value,
    ScheduledOrderStatus.IN_PROGRESS.value,
    ScheduledOrderStatus.COMPLETED.value,
    ScheduledOrderStatus.CANCELLED.value,
}


class OrderService:
    @staticmethod
    def prepare(data):
        """
        Validate the parties and location of a new order and price its lines.

        Shared by direct and scheduled order creation. Reads only.

        Returns:
            (client, driver or None, PriceSnapshot)
        """
        client_id = data.get('client_id')
        if client_id is None:
            raise ValidationError("client_id is required.")
        client = Client.query_active().filter_by(id=client_id).first()
        if not client:
            raise ValidationError(f"Client {client_id} does not exist.")

        LocationService.require_name(data.get('location'))

        driver = None
        driver_id = data.get('driver_id')
        if driver_id is not None:
            driver = DriverService.require_available(driver_id)

        snapshot = PricingService.snapshot(driver.id if driver else None, data.get('items'))
        return client, driver, snapshot

    @staticmethod
    def get_all(status=None, q=None):
        try:
            query = Order.query
            if status:
                query = query.filter_by(status=status)
            orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
            return filter_records(orders, q, ORDER_SEARCH_FIELDS)
        except Exception as e:
            logging.error(f"Error fetching orders: {e}", exc_info=True)
            raise ServiceError("Could not fetch orders. Please try again later.")

    @staticmethod
    def get_by_id(order_id):
        try:
            return db.session.get(Order, order_id)
        except Exception as e:
            logging.error(f"Error fetching order: {e}", exc_info=True)
            raise ServiceError("Could not fetch order. Please try again later.")

    @staticmethod
    def create(data):
        """Create an order and its priced items in one transaction."""
        try:
            client, driver, snapshot = OrderService.prepare(data)
            order = Order(
                client_id=client.id,
                driver_id=driver.id if driver else None,
                location=data['location'],
                status=OrderStatus.NEW.value,
                total_amount=snapshot.total_amount,
                driver_amount=snapshot.driver_amount,
            )
            order.items = [
                OrderItem(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    admin_price=line.admin_price,
                    driver_price=line.driver_price,
                )
                for line in snapshot.lines
            ]
            db.session.add(order)
            db.session.flush()
            db.session.add(OrderStatusAudit(order_id=order.id, old_status=None,
                                            new_status=order.status, reason='created'))
            db.session.commit()
            logging.info(f"Created order {order.id} with {len(order.items)} items, total {snapshot.total_amount}")
            return order
        except ServiceError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error creating order: {e}", exc_info=True)
            raise ServiceError("Could not create order. Please try again later.")

    @staticmethod
    def update_status(order_id, new_status, expected_status=None, reason=None):
        """
        Set an order's status.

        Any status may follow any other. When ``expected_status`` is given and
        the stored status differs, ConflictError is raised and nothing changes.
        Entering ``completed`` credits the driver once per order.

        Returns the order, or None if it does not exist.
        """
        if new_status not in ORDER_STATUSES:
            raise ValidationError(f"Invalid status: {new_status!r}.")
        if expected_status is not None and expected_status not in ORDER_STATUSES:
            raise ValidationError(f"Invalid expected_status: {expected_status!r}.")
        try:
            order = db.session.get(Order, order_id)
            if not order:
                return None
            old_status = order.status
            if expected_status is not None and old_status != expected_status:
                raise ConflictError(
                    f"Order {order_id} is '{old_status}', not '{expected_status}'. Reload and retry.")
            if old_status == new_status:
                return order

            result = db.session.execute(
                update(Order)
                .where(Order.id == order_id, Order.status == old_status)
                .values(status=new_status)
            )
            if result.rowcount != 1:
                raise ConflictError(f"Order {order_id} was changed by someone else. Reload and retry.")

            db.session.add(OrderStatusAudit(order_id=order_id, old_status=old_status,
                                            new_status=new_status, reason=reason))

            if order.scheduled_order_id is not None and new_status in MIRRORED_STATUSES:
                db.session.execute(
                    update(ScheduledOrder)
                    .where(ScheduledOrder.id == order.scheduled_order_id)
                    .values(status=new_status)
                )

            if new_status == OrderStatus.COMPLETED.value:
                LedgerService.credit_order_completion(order)

            db.session.commit()
            logging.info(f"Order {order_id} status {old_status} -> {new_status}")
            return order
        except ServiceError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error updating order status: {e}", exc_info=True)
            raise ServiceError("Could not update order status. Please try again later.")

    @staticmethod
    def get_status_history(order_id):
        try:
            return (OrderStatusAudit.query
                    .filter_by(order_id=order_id)
                    .order_by(OrderStatusAudit.id.asc())
                    .all())
        except Exception as e:
            logging.error(f"Error fetching order status history: {e}", exc_info=True)
            raise ServiceError("Could not fetch order status history. Please try again later.")

    @staticmethod
    def delete(order_id):
        """Delete an order with its items; earnings and scheduled orders keep their rows."""
        try:
            order = db.session.get(Order, order_id)
            if not order:
                return False
            DriverEarning.query.filter_by(order_id=order_id).update(
                {'order_id': None}, synchronize_session=False)
            ScheduledOrder.query.filter_by(actual_order_ref=order_id).update(
                {'actual_order_ref': None}, synchronize_session=False)
            db.session.delete(order)
            db.session.commit()
            logging.info(f"Deleted order {order_id}")
            return True
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error deleting order: {e}", exc_info=True)
            raise ServiceError("Could not delete order. Please try again later.")
