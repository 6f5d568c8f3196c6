from delivery_admin.extensions import db
from sqlalchemy import Numeric

class DriverWithdrawal(db.Model):
    __tablename__ = 'driver_withdrawal'
    id = db.Column(db.Integer, primary_key=True)
    driver_id = db.Column(db.Integer, db.ForeignKey('driver.id', ondelete='CASCADE'), nullable=False, index=True)
    amount = db.Column(Numeric(precision=12, scale=2), nullable=False)
    withdrawal_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.current_timestamp())
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())

    driver = db.relationship('Driver', lazy='select')

    __table_args__ = (
        db.CheckConstraint('amount > 0', name='check_driver_withdrawal_amount'),
    )
