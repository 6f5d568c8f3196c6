"""
Scheduled orders and their activation.

A scheduled order holds a priced snapshot and a due instant. Once due it is
materialised into a live Order exactly once: the activation pass claims the
row with a compare-and-swap on its status (``scheduled -> activating``),
reuses an Order that already points at it if one exists, otherwise copies
the snapshot into a new Order, and marks the row ``active``. All of that
commits together, so a failure leaves the row ``scheduled`` for the next pass.
"""

import logging
from sqlalchemy import update
from delivery_admin.extensions import db
from delivery_admin.models.order import Order, OrderStatus
from delivery_admin.models.order_item import OrderItem
from delivery_admin.models.order_status_audit import OrderStatusAudit
from delivery_admin.models.scheduled_order import ScheduledOrder, ScheduledOrderStatus
from delivery_admin.models.scheduled_order_item import ScheduledOrderItem
from delivery_admin.services.errors import ServiceError, ValidationError, ConflictError
from delivery_admin.services.order_service import OrderService, ORDER_SEARCH_FIELDS
from delivery_admin.utils.search import filter_records
from delivery_admin.utils.timezone_utils import convert_reference_to_utc, utc_now, ensure_utc

logger = logging.getLogger(__name__)


class ScheduledOrderService:
    @staticmethod
    def get_all(status=None, q=None):
        try:
            query = ScheduledOrder.query
            if status:
                query = query.filter_by(status=status)
            scheduled = query.order_by(ScheduledOrder.scheduled_datetime.asc(), ScheduledOrder.id.asc()).all()
            return filter_records(scheduled, q, ORDER_SEARCH_FIELDS)
        except Exception as e:
            logger.error(f"Error fetching scheduled orders: {e}", exc_info=True)
            raise ServiceError("Could not fetch scheduled orders. Please try again later.")

    @staticmethod
    def get_by_id(scheduled_order_id):
        try:
            return db.session.get(ScheduledOrder, scheduled_order_id)
        except Exception as e:
            logger.error(f"Error fetching scheduled order: {e}", exc_info=True)
            raise ServiceError("Could not fetch scheduled order. Please try again later.")

    @staticmethod
    def create(data, now=None):
        """
        Create a scheduled order and its priced items in one transaction.

        ``scheduled_datetime`` without an offset is a wall clock time in the
        reference timezone. It must not be in the past.
        """
        raw_when = data.get('scheduled_datetime')
        if not raw_when:
            raise ValidationError("scheduled_datetime is required.")
        try:
            scheduled_at = convert_reference_to_utc(raw_when)
        except (ValueError, TypeError):
            raise ValidationError(f"Invalid scheduled_datetime: {raw_when!r}.")
        now = ensure_utc(now) if now is not None else utc_now()
        if scheduled_at < now:
            raise ValidationError("scheduled_datetime cannot be in the past.")

        try:
            client, driver, snapshot = OrderService.prepare(data)
            scheduled = ScheduledOrder(
                client_id=client.id,
                driver_id=driver.id if driver else None,
                location=data['location'],
                status=ScheduledOrderStatus.SCHEDULED.value,
                scheduled_datetime=scheduled_at,
                total_amount=snapshot.total_amount,
                driver_amount=snapshot.driver_amount,
            )
            scheduled.items = [
                ScheduledOrderItem(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    admin_price=line.admin_price,
                    driver_price=line.driver_price,
                )
                for line in snapshot.lines
            ]
            db.session.add(scheduled)
            db.session.commit()
            logger.info(f"Created scheduled order {scheduled.id} due at {scheduled_at.isoformat()}")
            return scheduled
        except ServiceError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error creating scheduled order: {e}", exc_info=True)
            raise ServiceError("Could not create scheduled order. Please try again later.")

    @staticmethod
    def cancel(scheduled_order_id):
        """
        ``scheduled -> cancelled``. Returns None if the row does not exist;
        raises ConflictError if it is no longer waiting to be activated.
        """
        try:
            scheduled = db.session.get(ScheduledOrder, scheduled_order_id)
            if not scheduled:
                return None
            result = db.session.execute(
                update(ScheduledOrder)
                .where(ScheduledOrder.id == scheduled_order_id,
                       ScheduledOrder.status == ScheduledOrderStatus.SCHEDULED.value)
                .values(status=ScheduledOrderStatus.CANCELLED.value)
            )
            if result.rowcount != 1:
                db.session.rollback()
                db.session.refresh(scheduled)
                raise ConflictError(
                    f"Scheduled order {scheduled_order_id} is '{scheduled.status}' and can no longer be cancelled.")
            db.session.commit()
            logger.info(f"Cancelled scheduled order {scheduled_order_id}")
            return scheduled
        except ServiceError:
            raise
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error cancelling scheduled order: {e}", exc_info=True)
            raise ServiceError("Could not cancel scheduled order. Please try again later.")

    @staticmethod
    def delete(scheduled_order_id):
        """Delete a scheduled order and its items; a materialised Order stays."""
        try:
            scheduled = db.session.get(ScheduledOrder, scheduled_order_id)
            if not scheduled:
                return False
            Order.query.filter_by(scheduled_order_id=scheduled_order_id).update(
                {'scheduled_order_id': None}, synchronize_session=False)
            db.session.delete(scheduled)
            db.session.commit()
            logger.info(f"Deleted scheduled order {scheduled_order_id}")
            return True
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error deleting scheduled order: {e}", exc_info=True)
            raise ServiceError("Could not delete scheduled order. Please try again later.")

    @staticmethod
    def find_due_ids(now=None):
        now = ensure_utc(now) if now is not None else utc_now()
        rows = (db.session.query(ScheduledOrder.id)
                .filter(ScheduledOrder.status == ScheduledOrderStatus.SCHEDULED.value,
                        ScheduledOrder.scheduled_datetime <= now)
                .order_by(ScheduledOrder.scheduled_datetime.asc(), ScheduledOrder.id.asc())
                .all())
        return [row[0] for row in rows]

    @staticmethod
    def materialize(scheduled_order_id):
        """
        Activate one due scheduled order.

        Returns the id of its Order, or None when another worker claimed the
        row first (or it is no longer ``scheduled``). Does not catch errors:
        the caller rolls back and the row stays ``scheduled``.
        """
        claim = db.session.execute(
            update(ScheduledOrder)
            .where(ScheduledOrder.id == scheduled_order_id,
                   ScheduledOrder.status == ScheduledOrderStatus.SCHEDULED.value)
            .values(status=ScheduledOrderStatus.ACTIVATING.value)
        )
        if claim.rowcount != 1:
            db.session.rollback()
            logger.info(f"Scheduled order {scheduled_order_id} already claimed; skipping")
            return None

        scheduled = db.session.get(ScheduledOrder, scheduled_order_id)

        order = Order.query.filter_by(scheduled_order_id=scheduled_order_id).first()
        if order is not None:
            logger.warning(f"Scheduled order {scheduled_order_id} already has order {order.id}; reusing it")
        else:
            order = Order(
                client_id=scheduled.client_id,
                driver_id=scheduled.driver_id,
                location=scheduled.location,
                status=OrderStatus.NEW.value,
                total_amount=scheduled.total_amount,
                driver_amount=scheduled.driver_amount,
                scheduled_order_id=scheduled.id,
            )
            # Copied as-is; a scheduled order is never re-priced
            order.items = [
                OrderItem(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    admin_price=item.admin_price,
                    driver_price=item.driver_price,
                )
                for item in scheduled.items
            ]
            db.session.add(order)
            db.session.flush()
            db.session.add(OrderStatusAudit(order_id=order.id, old_status=None, new_status=order.status,
                                            reason=f'activated from scheduled order {scheduled.id}'))

        scheduled.status = ScheduledOrderStatus.ACTIVE.value
        scheduled.actual_order_ref = order.id
        db.session.commit()
        logger.info(f"Activated scheduled order {scheduled_order_id} as order {order.id}")
        return order.id

    @staticmethod
    def activate_due(now=None):
        """
        Materialise every due scheduled order.

        A failure on one row is logged and rolled back without stopping the
        pass. Returns ``[(scheduled_order_id, order_id), ...]`` for the rows
        this pass activated.
        """
        try:
            due_ids = ScheduledOrderService.find_due_ids(now)
            # End the read transaction before claiming rows one by one
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error finding due scheduled orders: {e}", exc_info=True)
            raise ServiceError("Could not check scheduled orders. Please try again later.")

        activated = []
        for scheduled_order_id in due_ids:
            try:
                order_id = ScheduledOrderService.materialize(scheduled_order_id)
            except Exception as e:
                db.session.rollback()
                logger.error(f"Error activating scheduled order {scheduled_order_id}: {e}", exc_info=True)
                continue
            if order_id is not None:
                activated.append((scheduled_order_id, order_id))

        if due_ids:
            logger.info(f"Activation pass: {len(activated)} of {len(due_ids)} due scheduled orders activated")
        return activated
