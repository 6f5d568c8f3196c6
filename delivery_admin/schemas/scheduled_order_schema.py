from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field
from marshmallow_sqlalchemy import fields as ma_fields
from marshmallow import fields, validate
from delivery_admin.models.scheduled_order import ScheduledOrder
from delivery_admin.models.scheduled_order_item import ScheduledOrderItem
from delivery_admin.schemas.order_schema import OrderCreateSchema
from delivery_admin.utils.timezone_utils import format_datetime_for_api, ensure_utc

class ScheduledOrderItemSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = ScheduledOrderItem
        load_instance = True
        include_fk = True
    id = auto_field(dump_only=True)
    scheduled_order_id = auto_field(dump_only=True)
    product_id = auto_field()
    quantity = auto_field()
    admin_price = fields.Float()
    driver_price = fields.Float()
    product_name = fields.Method('get_product_name', dump_only=True)
    line_admin_total = fields.Method('get_line_admin_total', dump_only=True)
    line_driver_total = fields.Method('get_line_driver_total', dump_only=True)

    def get_product_name(self, obj):
        return obj.product.name if obj.product else None

    def get_line_admin_total(self, obj):
        return float(obj.admin_price * obj.quantity)

    def get_line_driver_total(self, obj):
        return float(obj.driver_price * obj.quantity)

class ScheduledOrderSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = ScheduledOrder
        load_instance = True
        include_fk = True
    id = auto_field(dump_only=True)
    client_id = auto_field()
    driver_id = auto_field()
    location = auto_field()
    status = auto_field(dump_only=True)
    total_amount = fields.Float(dump_only=True)
    driver_amount = fields.Float(dump_only=True)
    # Rendered in the reference timezone, e.g. 2025-03-01T09:00:00+03:00
    scheduled_datetime = fields.Method('get_scheduled_datetime', dump_only=True)
    scheduled_datetime_utc = fields.Method('get_scheduled_datetime_utc', dump_only=True)
    actual_order_ref = auto_field(dump_only=True)
    created_at = auto_field(dump_only=True)
    updated_at = auto_field(dump_only=True)

    client_name = fields.Method('get_client_name', dump_only=True)
    driver_name = fields.Method('get_driver_name', dump_only=True)
    items = ma_fields.Nested('ScheduledOrderItemSchema', many=True, dump_only=True)

    def get_scheduled_datetime(self, obj):
        return format_datetime_for_api(obj.scheduled_datetime)

    def get_scheduled_datetime_utc(self, obj):
        value = ensure_utc(obj.scheduled_datetime)
        return value.isoformat() if value else None

    def get_client_name(self, obj):
        return obj.client.full_name if obj.client else None

    def get_driver_name(self, obj):
        return obj.driver.full_name if obj.driver else None

class ScheduledOrderCreateSchema(OrderCreateSchema):
    # ISO 8601; without an offset it is read as reference timezone wall clock time
    scheduled_datetime = fields.Str(required=True, validate=validate.Length(min=1))
