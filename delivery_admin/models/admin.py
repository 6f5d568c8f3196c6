from delivery_admin.extensions import db
from enum import Enum

class AdminRole(Enum):
    SUPER_ADMIN = "super_admin"
    SUB_ADMIN = "sub_admin"

class Admin(db.Model):
    __tablename__ = 'admin'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    full_name = db.Column(db.String(128), nullable=False)
    role = db.Column(db.String(32), nullable=False, default=AdminRole.SUB_ADMIN.value)
    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())

    __table_args__ = (
        db.CheckConstraint(
            f"role IN ({', '.join([repr(role.value) for role in AdminRole])})",
            name='check_admin_role'
        ),
    )

    @property
    def is_super_admin(self):
        return self.role == AdminRole.SUPER_ADMIN.value

    def __repr__(self):
        return f'<Admin {self.id}: {self.email} ({self.role})>'
