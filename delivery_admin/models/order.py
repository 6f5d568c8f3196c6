from delivery_admin.extensions import db
from sqlalchemy import Numeric
from enum import Enum

class OrderStatus(Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class Order(db.Model):
    __tablename__ = 'order'
    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey('client.id'), nullable=False, index=True)
    driver_id = db.Column(db.Integer, db.ForeignKey('driver.id', ondelete='SET NULL'), nullable=True, index=True)
    location = db.Column(db.String(128), nullable=False)
    status = db.Column(db.String(32), nullable=False, default=OrderStatus.NEW.value, index=True)
    # Sum of client-facing line totals, fixed at creation
    total_amount = db.Column(Numeric(precision=12, scale=2), nullable=False, default=0)
    # Sum of driver-facing line totals, fixed at creation
    driver_amount = db.Column(Numeric(precision=12, scale=2), nullable=False, default=0)
    # Set when the order was materialised from a scheduled order; one order per scheduled order
    scheduled_order_id = db.Column(db.Integer, nullable=True, unique=True, index=True)
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, default=db.func.current_timestamp(), onupdate=db.func.current_timestamp())

    client = db.relationship('Client', backref='orders', lazy='select')
    driver = db.relationship('Driver', backref='orders', lazy='select')
    items = db.relationship('OrderItem', back_populates='order', cascade='all, delete-orphan',
                            order_by='OrderItem.id', lazy='select')

    __table_args__ = (
        db.CheckConstraint(
            f"status IN ({', '.join([repr(status.value) for status in OrderStatus])})",
            name='check_order_status'
        ),
    )

    def __repr__(self):
        return f'<Order {self.id} - {self.status}>'
