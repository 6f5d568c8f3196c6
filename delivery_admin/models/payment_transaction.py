from delivery_admin.extensions import db
from sqlalchemy import Numeric
from enum import Enum

class TransactionType(Enum):
    PAYMENT = "payment"
    WITHDRAWAL = "withdrawal"

class PaymentTransaction(db.Model):
    __tablename__ = 'payment_transaction'
    id = db.Column(db.Integer, primary_key=True)
    driver_id = db.Column(db.Integer, db.ForeignKey('driver.id', ondelete='CASCADE'), nullable=False, index=True)
    amount = db.Column(Numeric(precision=12, scale=2), nullable=False)
    transaction_type = db.Column(db.String(16), nullable=False, default=TransactionType.PAYMENT.value)
    payment_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.current_timestamp())
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())

    driver = db.relationship('Driver', lazy='select')

    __table_args__ = (
        db.CheckConstraint('amount > 0', name='check_payment_transaction_amount'),
    )
