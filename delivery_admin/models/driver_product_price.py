from delivery_admin.extensions import db
from sqlalchemy import Numeric

class DriverProductPrice(db.Model):
    """Per-driver payout override for one product."""
    __tablename__ = 'driver_product_price'
    id = db.Column(db.Integer, primary_key=True)
    driver_id = db.Column(db.Integer, db.ForeignKey('driver.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('product.id', ondelete='CASCADE'), nullable=False, index=True)
    driver_price = db.Column(Numeric(precision=12, scale=2), nullable=False)
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())

    driver = db.relationship('Driver', back_populates='product_prices')
    product = db.relationship('Product', lazy='select')

    __table_args__ = (
        db.UniqueConstraint('driver_id', 'product_id', name='uq_driver_product_price'),
        db.CheckConstraint('driver_price > 0', name='check_driver_price_positive'),
    )
