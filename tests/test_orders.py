import pytest
from decimal import Decimal
from delivery_admin.extensions import db
from delivery_admin.models.driver_earning import DriverEarning
from delivery_admin.models.driver_payment import DriverPayment
from delivery_admin.models.order import Order
from delivery_admin.models.order_item import OrderItem
from delivery_admin.models.order_status_audit import OrderStatusAudit
from delivery_admin.services.errors import ConflictError, ValidationError
from delivery_admin.services.order_service import OrderService


def pending_for(driver_id):
    return DriverPayment.query.filter_by(driver_id=driver_id).one().pending_amount


class TestCreateOrder:

    def test_create_writes_order_and_snapshot_items(self, order_data, order_setup):
        order = OrderService.create(order_data)

        assert order.status == 'new'
        assert order.total_amount == Decimal('20.00')
        assert order.driver_amount == Decimal('15.00')
        items = OrderItem.query.filter_by(order_id=order.id).all()
        assert len(items) == 1
        assert items[0].quantity == 2
        assert items[0].admin_price == Decimal('10.00')
        assert items[0].driver_price == Decimal('7.50')

    def test_prices_are_not_recomputed_after_catalog_change(self, order_data, order_setup):
        order = OrderService.create(order_data)
        order_setup['product'].admin_price = Decimal('99.00')
        db.session.commit()

        reloaded = db.session.get(Order, order.id)
        assert reloaded.total_amount == Decimal('20.00')
        assert reloaded.items[0].admin_price == Decimal('10.00')

    def test_unknown_product_writes_nothing(self, order_data):
        order_data['items'].append({'product_id': 999, 'quantity': 1})
        with pytest.raises(ValidationError):
            OrderService.create(order_data)
        assert Order.query.count() == 0
        assert OrderItem.query.count() == 0

    def test_location_must_be_in_reference_set(self, order_data):
        order_data['location'] = 'Nowhere'
        with pytest.raises(ValidationError):
            OrderService.create(order_data)
        assert Order.query.count() == 0

    def test_unavailable_driver_rejected(self, order_data, make_driver):
        busy = make_driver(full_name='Busy Driver', status='in_delivery')
        order_data['driver_id'] = busy.id
        with pytest.raises(ValidationError):
            OrderService.create(order_data)

    def test_unassigned_order_allowed(self, order_data):
        order_data['driver_id'] = None
        order = OrderService.create(order_data)
        assert order.driver_id is None
        assert order.driver_amount == Decimal('20.00')

    def test_search_matches_client_name(self, order_data):
        OrderService.create(order_data)
        assert len(OrderService.get_all(q='sara')) == 1
        assert OrderService.get_all(q='nobody') == []


class TestOrderStatus:

    def test_any_transition_allowed_and_audited(self, order_data):
        order = OrderService.create(order_data)
        OrderService.update_status(order.id, 'cancelled')
        OrderService.update_status(order.id, 'new', reason='reopened')

        history = OrderService.get_status_history(order.id)
        assert [(h.old_status, h.new_status) for h in history] == [
            (None, 'new'), ('new', 'cancelled'), ('cancelled', 'new')
        ]
        assert history[-1].reason == 'reopened'

    def test_same_status_is_noop(self, order_data):
        order = OrderService.create(order_data)
        OrderService.update_status(order.id, 'new')
        assert OrderStatusAudit.query.filter_by(order_id=order.id).count() == 1

    def test_expected_status_mismatch_conflicts(self, order_data):
        order = OrderService.create(order_data)
        OrderService.update_status(order.id, 'in_progress')
        with pytest.raises(ConflictError):
            OrderService.update_status(order.id, 'completed', expected_status='new')
        assert db.session.get(Order, order.id).status == 'in_progress'

    def test_invalid_status_rejected(self, order_data):
        order = OrderService.create(order_data)
        with pytest.raises(ValidationError):
            OrderService.update_status(order.id, 'shipped')

    def test_missing_order_returns_none(self, app):
        assert OrderService.update_status(12345, 'completed') is None

    def test_completion_credits_driver_once(self, order_data, order_setup):
        driver_id = order_setup['driver'].id
        order = OrderService.create(order_data)

        OrderService.update_status(order.id, 'completed')
        assert pending_for(driver_id) == Decimal('15.00')

        OrderService.update_status(order.id, 'in_progress')
        OrderService.update_status(order.id, 'completed')
        assert pending_for(driver_id) == Decimal('15.00')
        assert DriverEarning.query.filter_by(order_id=order.id).count() == 1

    def test_unassigned_completion_credits_nobody(self, order_data):
        order_data['driver_id'] = None
        order = OrderService.create(order_data)
        OrderService.update_status(order.id, 'completed')
        assert DriverEarning.query.count() == 0


class TestDeleteOrder:

    def test_delete_removes_items(self, order_data):
        order = OrderService.create(order_data)
        assert OrderService.delete(order.id) is True
        assert Order.query.count() == 0
        assert OrderItem.query.count() == 0
        assert OrderStatusAudit.query.count() == 0

    def test_delete_keeps_earning_record(self, order_data):
        order = OrderService.create(order_data)
        OrderService.update_status(order.id, 'completed')
        OrderService.delete(order.id)
        earning = DriverEarning.query.one()
        assert earning.order_id is None
        assert earning.amount == Decimal('15.00')

    def test_delete_missing_returns_false(self, app):
        assert OrderService.delete(4242) is False
