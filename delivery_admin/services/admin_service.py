import logging
from delivery_admin.extensions import db
from delivery_admin.models.admin import Admin, AdminRole
from delivery_admin.services.errors import ServiceError, ValidationError, PermissionDenied

ADMIN_ROLES = {role.value for role in AdminRole}

class AdminService:
    @staticmethod
    def get_all():
        try:
            return Admin.query.order_by(Admin.created_at.desc(), Admin.id.desc()).all()
        except Exception as e:
            logging.error(f"Error fetching admins: {e}", exc_info=True)
            raise ServiceError("Could not fetch admins. Please try again later.")

    @staticmethod
    def get_by_id(admin_id):
        try:
            return db.session.get(Admin, admin_id)
        except Exception as e:
            logging.error(f"Error fetching admin: {e}", exc_info=True)
            raise ServiceError("Could not fetch admin. Please try again later.")

    @staticmethod
    def require_super_admin(acting_admin_id):
        """Return the acting admin if it is a super admin, else raise PermissionDenied."""
        if acting_admin_id is None:
            raise PermissionDenied("An acting admin is required for this action.")
        acting = db.session.get(Admin, acting_admin_id)
        if not acting:
            raise PermissionDenied("Unknown acting admin.")
        if not acting.is_super_admin:
            raise PermissionDenied("Only super admins can manage admins.")
        return acting

    @staticmethod
    def create(data, acting_admin_id):
        try:
            AdminService.require_super_admin(acting_admin_id)
            role = data.get('role') or AdminRole.SUB_ADMIN.value
            if role not in ADMIN_ROLES:
                raise ValidationError(f"Invalid role: {role!r}.")
            email = (data.get('email') or '').strip().lower()
            if Admin.query.filter(db.func.lower(Admin.email) == email).first():
                raise ValidationError("An admin with this email already exists.")
            admin = Admin(email=email, full_name=data.get('full_name'), role=role)
            db.session.add(admin)
            db.session.commit()
            logging.info(f"Admin {acting_admin_id} created admin {admin.id} ({admin.role})")
            return admin
        except ServiceError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error creating admin: {e}", exc_info=True)
            raise ServiceError("Could not create admin. Please try again later.")

    @staticmethod
    def delete(admin_id, acting_admin_id):
        try:
            acting = AdminService.require_super_admin(acting_admin_id)
            admin = db.session.get(Admin, admin_id)
            if not admin:
                return False
            if admin.id == acting.id:
                raise PermissionDenied("You cannot delete your own admin account.")
            db.session.delete(admin)
            db.session.commit()
            logging.info(f"Admin {acting_admin_id} deleted admin {admin_id}")
            return True
        except ServiceError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error deleting admin: {e}", exc_info=True)
            raise ServiceError("Could not delete admin. Please try again later.")
