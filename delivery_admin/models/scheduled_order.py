from delivery_admin.extensions import db
from sqlalchemy import Numeric
from enum import Enum

class ScheduledOrderStatus(Enum):
    SCHEDULED = "scheduled"
    # Claimed by one activation worker; never visible after a commit
    ACTIVATING = "activating"
    ACTIVE = "active"
    NEW = "new"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class ScheduledOrder(db.Model):
    __tablename__ = 'scheduled_order'
    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey('client.id'), nullable=False, index=True)
    driver_id = db.Column(db.Integer, db.ForeignKey('driver.id', ondelete='SET NULL'), nullable=True, index=True)
    location = db.Column(db.String(128), nullable=False)
    total_amount = db.Column(Numeric(precision=12, scale=2), nullable=False, default=0)
    driver_amount = db.Column(Numeric(precision=12, scale=2), nullable=False, default=0)
    status = db.Column(db.String(32), nullable=False, default=ScheduledOrderStatus.SCHEDULED.value, index=True)
    # Always stored as a UTC instant
    scheduled_datetime = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    actual_order_ref = db.Column(db.Integer, db.ForeignKey('order.id', ondelete='SET NULL'), nullable=True)
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, default=db.func.current_timestamp(), onupdate=db.func.current_timestamp())

    client = db.relationship('Client', lazy='select')
    driver = db.relationship('Driver', lazy='select')
    actual_order = db.relationship('Order', foreign_keys=[actual_order_ref], lazy='select')
    items = db.relationship('ScheduledOrderItem', back_populates='scheduled_order', cascade='all, delete-orphan',
                            order_by='ScheduledOrderItem.id', lazy='select')

    __table_args__ = (
        db.CheckConstraint(
            f"status IN ({', '.join([repr(status.value) for status in ScheduledOrderStatus])})",
            name='check_scheduled_order_status'
        ),
    )

    def __repr__(self):
        return f'<ScheduledOrder {self.id} - {self.status} @ {self.scheduled_datetime}>'
