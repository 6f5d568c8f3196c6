from delivery_admin.extensions import db
from sqlalchemy import Numeric

class OrderItem(db.Model):
    """Price snapshot for one order line."""
    __tablename__ = 'order_item'
    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('order.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('product.id'), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    admin_price = db.Column(Numeric(precision=12, scale=2), nullable=False)
    driver_price = db.Column(Numeric(precision=12, scale=2), nullable=False)
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())

    order = db.relationship('Order', back_populates='items')
    product = db.relationship('Product', lazy='joined')

    __table_args__ = (
        db.CheckConstraint('quantity >= 1', name='check_order_item_quantity'),
    )

    @property
    def line_admin_total(self):
        return self.admin_price * self.quantity

    @property
    def line_driver_total(self):
        return self.driver_price * self.quantity
