import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from delivery_admin.extensions import db
from delivery_admin.models.order import Order
from delivery_admin.models.order_item import OrderItem
from delivery_admin.models.scheduled_order import ScheduledOrder
from delivery_admin.services import scheduled_order_service as scheduled_module
from delivery_admin.services.errors import ConflictError, ValidationError
from delivery_admin.services.order_service import OrderService
from delivery_admin.services.scheduled_order_service import ScheduledOrderService
from delivery_admin.utils.timezone_utils import ensure_utc

NOW = datetime(2025, 3, 1, 6, 0, tzinfo=timezone.utc)  # 09:00 in Riyadh


@pytest.fixture
def scheduled_data(order_data):
    data = dict(order_data)
    # Riyadh wall clock time, one hour after NOW
    data['scheduled_datetime'] = '2025-03-01T10:00:00'
    return data


@pytest.fixture
def scheduled(scheduled_data):
    return ScheduledOrderService.create(scheduled_data, now=NOW)


def later(hours=2):
    return NOW + timedelta(hours=hours)


class TestCreateScheduledOrder:

    def test_naive_time_is_riyadh_wall_clock(self, scheduled):
        assert ensure_utc(scheduled.scheduled_datetime) == datetime(2025, 3, 1, 7, 0, tzinfo=timezone.utc)
        assert scheduled.status == 'scheduled'
        assert scheduled.total_amount == Decimal('20.00')
        assert scheduled.driver_amount == Decimal('15.00')
        assert len(scheduled.items) == 1

    def test_offset_time_is_kept_as_instant(self, scheduled_data):
        scheduled_data['scheduled_datetime'] = '2025-03-01T08:30:00Z'
        scheduled = ScheduledOrderService.create(scheduled_data, now=NOW)
        assert ensure_utc(scheduled.scheduled_datetime) == datetime(2025, 3, 1, 8, 30, tzinfo=timezone.utc)

    def test_past_time_rejected(self, scheduled_data):
        scheduled_data['scheduled_datetime'] = '2025-03-01T08:00:00'
        with pytest.raises(ValidationError):
            ScheduledOrderService.create(scheduled_data, now=NOW)
        assert ScheduledOrder.query.count() == 0

    def test_garbage_time_rejected(self, scheduled_data):
        scheduled_data['scheduled_datetime'] = 'tomorrow-ish'
        with pytest.raises(ValidationError):
            ScheduledOrderService.create(scheduled_data, now=NOW)

    def test_numeric_time_rejected(self, scheduled_data):
        scheduled_data['scheduled_datetime'] = 20250301
        with pytest.raises(ValidationError):
            ScheduledOrderService.create(scheduled_data, now=NOW)
        assert ScheduledOrder.query.count() == 0


class TestActivation:

    def test_not_due_yet(self, scheduled):
        assert ScheduledOrderService.activate_due(now=NOW) == []
        assert Order.query.count() == 0

    def test_due_order_materialises_once(self, scheduled):
        activated = ScheduledOrderService.activate_due(now=later())
        assert len(activated) == 1
        scheduled_id, order_id = activated[0]
        assert scheduled_id == scheduled.id

        row = db.session.get(ScheduledOrder, scheduled.id)
        assert row.status == 'active'
        assert row.actual_order_ref == order_id

        order = db.session.get(Order, order_id)
        assert order.status == 'new'
        assert order.scheduled_order_id == scheduled.id
        assert order.client_id == row.client_id
        assert order.driver_id == row.driver_id
        assert order.location == row.location
        assert order.total_amount == row.total_amount
        assert order.driver_amount == row.driver_amount

    def test_items_copied_field_for_field(self, scheduled, order_setup):
        # A later catalogue change must not leak into the materialised order
        order_setup['product'].admin_price = Decimal('50.00')
        db.session.commit()

        [(scheduled_id, order_id)] = ScheduledOrderService.activate_due(now=later())
        source = [(i.product_id, i.quantity, i.admin_price, i.driver_price)
                  for i in db.session.get(ScheduledOrder, scheduled_id).items]
        copied = [(i.product_id, i.quantity, i.admin_price, i.driver_price)
                  for i in OrderItem.query.filter_by(order_id=order_id).order_by(OrderItem.id).all()]
        assert copied == source
        assert copied[0][2] == Decimal('10.00')

    def test_second_pass_is_idempotent(self, scheduled):
        ScheduledOrderService.activate_due(now=later())
        assert ScheduledOrderService.activate_due(now=later(3)) == []
        assert Order.query.count() == 1

    def test_lost_claim_is_skipped(self, scheduled):
        # Another worker already holds the claim
        db.session.get(ScheduledOrder, scheduled.id).status = 'activating'
        db.session.commit()

        assert ScheduledOrderService.materialize(scheduled.id) is None
        assert Order.query.count() == 0

    def test_existing_order_is_reused(self, scheduled, order_data):
        leftover = OrderService.create(order_data)
        leftover.scheduled_order_id = scheduled.id
        db.session.commit()

        activated = ScheduledOrderService.activate_due(now=later())
        assert activated == [(scheduled.id, leftover.id)]
        assert Order.query.count() == 1
        assert db.session.get(ScheduledOrder, scheduled.id).actual_order_ref == leftover.id

    def test_failure_rolls_back_and_leaves_row_scheduled(self, scheduled, monkeypatch):
        def explode(*args, **kwargs):
            raise RuntimeError("database went away")
        monkeypatch.setattr(scheduled_module, 'OrderStatusAudit', explode)

        assert ScheduledOrderService.activate_due(now=later()) == []
        assert db.session.get(ScheduledOrder, scheduled.id).status == 'scheduled'
        assert Order.query.count() == 0

        monkeypatch.undo()
        assert len(ScheduledOrderService.activate_due(now=later())) == 1
        assert Order.query.count() == 1

    def test_one_failure_does_not_stop_the_pass(self, scheduled_data, monkeypatch):
        first = ScheduledOrderService.create(scheduled_data, now=NOW)
        scheduled_data['scheduled_datetime'] = '2025-03-01T10:30:00'
        second = ScheduledOrderService.create(scheduled_data, now=NOW)

        real_materialize = ScheduledOrderService.materialize

        def flaky(scheduled_order_id):
            if scheduled_order_id == first.id:
                raise RuntimeError("boom")
            return real_materialize(scheduled_order_id)
        monkeypatch.setattr(ScheduledOrderService, 'materialize', staticmethod(flaky))

        activated = ScheduledOrderService.activate_due(now=later())
        assert [scheduled_id for scheduled_id, _ in activated] == [second.id]

    def test_order_status_is_mirrored(self, scheduled):
        [(scheduled_id, order_id)] = ScheduledOrderService.activate_due(now=later())
        OrderService.update_status(order_id, 'in_progress')
        assert db.session.get(ScheduledOrder, scheduled_id).status == 'in_progress'


class TestCancelAndDelete:

    def test_cancel_scheduled(self, scheduled):
        cancelled = ScheduledOrderService.cancel(scheduled.id)
        assert cancelled.status == 'cancelled'
        assert ScheduledOrderService.activate_due(now=later()) == []

    def test_cancel_after_activation_conflicts(self, scheduled):
        ScheduledOrderService.activate_due(now=later())
        with pytest.raises(ConflictError):
            ScheduledOrderService.cancel(scheduled.id)
        assert db.session.get(ScheduledOrder, scheduled.id).status == 'active'

    def test_cancel_missing_returns_none(self, app):
        assert ScheduledOrderService.cancel(777) is None

    def test_delete_keeps_materialised_order(self, scheduled):
        [(scheduled_id, order_id)] = ScheduledOrderService.activate_due(now=later())
        assert ScheduledOrderService.delete(scheduled_id) is True
        assert ScheduledOrder.query.count() == 0
        order = db.session.get(Order, order_id)
        assert order is not None
        assert order.scheduled_order_id is None
        assert len(order.items) == 1
