from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field
from marshmallow import fields, validate
from delivery_admin.models.location import Location

class LocationSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Location
        load_instance = True
    id = auto_field(dump_only=True)
    name = fields.Str(required=True, validate=validate.Length(min=1, max=128))
    address = auto_field()
    created_at = auto_field(dump_only=True)
    updated_at = auto_field(dump_only=True)
