from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field
from marshmallow import Schema, fields, validate
from delivery_admin.models.driver import Driver, DriverStatus
from delivery_admin.models.driver_product_price import DriverProductPrice

class DriverProductPriceSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = DriverProductPrice
        load_instance = True
        include_fk = True
    id = auto_field(dump_only=True)
    driver_id = auto_field(dump_only=True)
    product_id = auto_field()
    driver_price = fields.Float(required=True)
    product_name = fields.Method('get_product_name', dump_only=True)
    created_at = auto_field(dump_only=True)

    def get_product_name(self, obj):
        return obj.product.name if obj.product else None

class ProductPriceEntrySchema(Schema):
    """One override in a create or replace request; non-positive prices are dropped."""
    product_id = fields.Int(required=True, validate=validate.Range(min=1))
    driver_price = fields.Float(required=True)

class DriverSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Driver
        load_instance = True
        exclude = ('is_deleted',)
    id = auto_field(dump_only=True)
    full_name = fields.Str(required=True, validate=validate.Length(min=1, max=128))
    car_type = fields.Str(required=True, validate=validate.Length(min=1, max=64))
    car_image_url = auto_field()
    location = fields.Str(required=True, validate=validate.Length(min=1, max=128))
    phone_number = fields.Str(required=True, validate=validate.Length(min=1, max=32))
    status = fields.Str(validate=validate.OneOf([s.value for s in DriverStatus]))
    created_at = auto_field(dump_only=True)
    updated_at = auto_field(dump_only=True)
