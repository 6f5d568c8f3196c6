from delivery_admin.extensions import db
from sqlalchemy import Numeric

class DriverPayment(db.Model):
    """Running pending/paid balances for one driver."""
    __tablename__ = 'driver_payment'
    id = db.Column(db.Integer, primary_key=True)
    driver_id = db.Column(db.Integer, db.ForeignKey('driver.id', ondelete='CASCADE'), nullable=False, unique=True, index=True)
    # Earned but not yet paid out
    pending_amount = db.Column(Numeric(precision=12, scale=2), nullable=False, default=0)
    # Transferred out of pending, not yet handed to the driver
    paid_amount = db.Column(Numeric(precision=12, scale=2), nullable=False, default=0)
    updated_at = db.Column(db.DateTime, default=db.func.current_timestamp(), onupdate=db.func.current_timestamp())

    driver = db.relationship('Driver', back_populates='payment')

    __table_args__ = (
        db.CheckConstraint('pending_amount >= 0', name='check_driver_payment_pending'),
        db.CheckConstraint('paid_amount >= 0', name='check_driver_payment_paid'),
    )
