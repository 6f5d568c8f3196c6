from flask import Blueprint, request, jsonify
from delivery_admin.services.admin_service import AdminService
from delivery_admin.services.errors import ServiceError
from delivery_admin.schemas.admin_schema import AdminSchema
from delivery_admin.utils.search import filter_records
from delivery_admin.extensions import db
import logging

admin_bp = Blueprint('admin', __name__)
schema = AdminSchema(session=db.session)
schema_many = AdminSchema(many=True, session=db.session)

def _acting_admin_id():
    """Admin id supplied by the identity provider in the X-Admin-Id header."""
    value = request.headers.get('X-Admin-Id', '').strip()
    return int(value) if value.isdigit() else None

@admin_bp.route('/admins', methods=['GET'])
def list_admins():
    try:
        admins = AdminService.get_all()
        admins = filter_records(admins, request.args.get('q'), ('email', 'full_name', 'role'))
        return jsonify(schema_many.dump(admins)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_admins: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@admin_bp.route('/admins', methods=['POST'])
def create_admin():
    try:
        data = request.get_json(silent=True)
        errors = schema.validate(data)
        if errors:
            return jsonify(errors), 400
        admin = AdminService.create(data, acting_admin_id=_acting_admin_id())
        return jsonify(schema.dump(admin)), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in create_admin: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@admin_bp.route('/admins/<int:admin_id>', methods=['DELETE'])
def delete_admin(admin_id):
    try:
        success = AdminService.delete(admin_id, acting_admin_id=_acting_admin_id())
        if not success:
            return jsonify({'error': 'Admin not found'}), 404
        return jsonify({'message': 'Admin deleted successfully'}), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in delete_admin: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
