from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field
from marshmallow_sqlalchemy import fields as ma_fields
from marshmallow import Schema, fields, validate
from delivery_admin.models.order import Order, OrderStatus
from delivery_admin.models.order_item import OrderItem
from delivery_admin.models.order_status_audit import OrderStatusAudit

ORDER_STATUS_VALUES = [status.value for status in OrderStatus]

class OrderItemSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = OrderItem
        load_instance = True
        include_fk = True
    id = auto_field(dump_only=True)
    order_id = auto_field(dump_only=True)
    product_id = auto_field()
    quantity = auto_field()
    admin_price = fields.Float()
    driver_price = fields.Float()
    product_name = fields.Method('get_product_name', dump_only=True)
    line_admin_total = fields.Float(dump_only=True)
    line_driver_total = fields.Float(dump_only=True)

    def get_product_name(self, obj):
        return obj.product.name if obj.product else None

class OrderStatusAuditSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = OrderStatusAudit
        include_fk = True
    id = auto_field(dump_only=True)
    order_id = auto_field(dump_only=True)
    old_status = auto_field()
    new_status = auto_field()
    reason = auto_field()
    changed_at = auto_field(dump_only=True)

class OrderSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Order
        load_instance = True
        include_fk = True
    id = auto_field(dump_only=True)
    client_id = auto_field()
    driver_id = auto_field()
    location = auto_field()
    status = auto_field()
    total_amount = fields.Float(dump_only=True)
    driver_amount = fields.Float(dump_only=True)
    scheduled_order_id = auto_field(dump_only=True)
    created_at = auto_field(dump_only=True)
    updated_at = auto_field(dump_only=True)

    client_name = fields.Method('get_client_name', dump_only=True)
    driver_name = fields.Method('get_driver_name', dump_only=True)
    items = ma_fields.Nested('OrderItemSchema', many=True, dump_only=True)

    def get_client_name(self, obj):
        return obj.client.full_name if obj.client else None

    def get_driver_name(self, obj):
        return obj.driver.full_name if obj.driver else None

class OrderLineSchema(Schema):
    product_id = fields.Int(required=True, validate=validate.Range(min=1))
    quantity = fields.Int(required=True, strict=True, validate=validate.Range(min=1))

class PricingQuoteSchema(Schema):
    driver_id = fields.Int(allow_none=True, load_default=None)
    items = fields.List(fields.Nested(OrderLineSchema), required=True, validate=validate.Length(min=1))

class OrderCreateSchema(PricingQuoteSchema):
    client_id = fields.Int(required=True)
    location = fields.Str(required=True, validate=validate.Length(min=1, max=128))

class OrderStatusUpdateSchema(Schema):
    status = fields.Str(required=True, validate=validate.OneOf(ORDER_STATUS_VALUES))
    # Optimistic check: reject the change unless the order is still in this status
    expected_status = fields.Str(allow_none=True, validate=validate.OneOf(ORDER_STATUS_VALUES))
    reason = fields.Str(allow_none=True, validate=validate.Length(max=512))
