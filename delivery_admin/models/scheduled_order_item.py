from delivery_admin.extensions import db
from sqlalchemy import Numeric

class ScheduledOrderItem(db.Model):
    __tablename__ = 'scheduled_order_item'
    id = db.Column(db.Integer, primary_key=True)
    scheduled_order_id = db.Column(db.Integer, db.ForeignKey('scheduled_order.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('product.id'), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    admin_price = db.Column(Numeric(precision=12, scale=2), nullable=False)
    driver_price = db.Column(Numeric(precision=12, scale=2), nullable=False)
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())

    scheduled_order = db.relationship('ScheduledOrder', back_populates='items')
    product = db.relationship('Product', lazy='joined')

    __table_args__ = (
        db.CheckConstraint('quantity >= 1', name='check_scheduled_order_item_quantity'),
    )
