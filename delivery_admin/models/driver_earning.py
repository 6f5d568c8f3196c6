from delivery_admin.extensions import db
from sqlalchemy import Numeric

class DriverEarning(db.Model):
    """Credit of a completed order's driver amount into the pending balance."""
    __tablename__ = 'driver_earning'
    id = db.Column(db.Integer, primary_key=True)
    driver_id = db.Column(db.Integer, db.ForeignKey('driver.id', ondelete='CASCADE'), nullable=False, index=True)
    # One credit per order
    order_id = db.Column(db.Integer, db.ForeignKey('order.id', ondelete='SET NULL'), nullable=True, unique=True)
    amount = db.Column(Numeric(precision=12, scale=2), nullable=False)
    credited_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.current_timestamp())
