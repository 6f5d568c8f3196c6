from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field
from marshmallow import fields, validate
from delivery_admin.models.product import Product

class ProductSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Product
        load_instance = True
        exclude = ('is_deleted',)
    id = auto_field(dump_only=True)
    name = fields.Str(required=True, validate=validate.Length(min=1, max=128))
    admin_price = fields.Float(required=True, validate=validate.Range(min=0))
    profit_amount = fields.Float(allow_none=True)
    note = auto_field()
    photo_url = auto_field()
    created_at = auto_field(dump_only=True)
    updated_at = auto_field(dump_only=True)
