from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field
from marshmallow import Schema, fields, validate
from delivery_admin.models.driver_earning import DriverEarning
from delivery_admin.models.driver_payment import DriverPayment
from delivery_admin.models.driver_withdrawal import DriverWithdrawal
from delivery_admin.models.payment_transaction import PaymentTransaction

class DriverPaymentSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = DriverPayment
        include_fk = True
    id = auto_field(dump_only=True)
    driver_id = auto_field(dump_only=True)
    pending_amount = fields.Float(dump_only=True)
    paid_amount = fields.Float(dump_only=True)
    updated_at = auto_field(dump_only=True)

class PaymentTransactionSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = PaymentTransaction
        include_fk = True
    id = auto_field(dump_only=True)
    driver_id = auto_field(dump_only=True)
    amount = fields.Float(dump_only=True)
    transaction_type = auto_field(dump_only=True)
    payment_date = auto_field(dump_only=True)
    notes = auto_field()
    driver_name = fields.Method('get_driver_name', dump_only=True)

    def get_driver_name(self, obj):
        return obj.driver.full_name if obj.driver else None

class DriverWithdrawalSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = DriverWithdrawal
        include_fk = True
    id = auto_field(dump_only=True)
    driver_id = auto_field(dump_only=True)
    amount = fields.Float(dump_only=True)
    withdrawal_date = auto_field(dump_only=True)
    notes = auto_field()
    driver_name = fields.Method('get_driver_name', dump_only=True)

    def get_driver_name(self, obj):
        return obj.driver.full_name if obj.driver else None

class DriverEarningSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = DriverEarning
        include_fk = True
    id = auto_field(dump_only=True)
    driver_id = auto_field(dump_only=True)
    order_id = auto_field(dump_only=True)
    amount = fields.Float(dump_only=True)
    credited_at = auto_field(dump_only=True)

class DriverBalanceSchema(Schema):
    driver_id = fields.Int()
    driver_name = fields.Str()
    driver_status = fields.Str()
    pending_amount = fields.Float()
    paid_amount = fields.Float()
    total_withdrawn = fields.Float()
    has_ledger = fields.Bool()
    driver_deleted = fields.Bool()

class LedgerAdjustmentSchema(Schema):
    """Body of a payment or withdrawal request."""
    amount = fields.Decimal(required=True, places=2, allow_nan=False)
    notes = fields.Str(allow_none=True, validate=validate.Length(max=1000))
