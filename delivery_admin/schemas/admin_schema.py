from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field
from marshmallow import fields, validate
from delivery_admin.models.admin import Admin, AdminRole

class AdminSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Admin
        load_instance = True
    id = auto_field(dump_only=True)
    email = fields.Email(required=True)
    full_name = fields.Str(required=True, validate=validate.Length(min=1, max=128))
    role = fields.Str(load_default=AdminRole.SUB_ADMIN.value,
                      validate=validate.OneOf([r.value for r in AdminRole]))
    created_at = auto_field(dump_only=True)
