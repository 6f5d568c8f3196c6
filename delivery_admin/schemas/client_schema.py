from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field
from marshmallow import fields, validate
from delivery_admin.models.client import Client

class ClientSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Client
        load_instance = True
        exclude = ('is_deleted',)
    id = auto_field(dump_only=True)
    full_name = fields.Str(required=True, validate=validate.Length(min=1, max=128))
    location = fields.Str(required=True, validate=validate.Length(min=1, max=128))
    phone_number = fields.Str(required=True, validate=validate.Length(min=1, max=32))
    house_image_url = auto_field()
    created_at = auto_field(dump_only=True)
    updated_at = auto_field(dump_only=True)
