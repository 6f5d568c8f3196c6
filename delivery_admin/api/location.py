from flask import Blueprint, request, jsonify
from delivery_admin.services.location_service import LocationService
from delivery_admin.services.errors import ServiceError
from delivery_admin.schemas.location_schema import LocationSchema
from delivery_admin.utils.search import filter_records
from delivery_admin.extensions import db
import logging

location_bp = Blueprint('location', __name__)
schema = LocationSchema(session=db.session)
schema_many = LocationSchema(many=True, session=db.session)

@location_bp.route('/locations', methods=['GET'])
def list_locations():
    try:
        locations = LocationService.get_all()
        locations = filter_records(locations, request.args.get('q'), ('name', 'address'))
        return jsonify(schema_many.dump(locations)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_locations: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@location_bp.route('/locations/<int:location_id>', methods=['GET'])
def get_location(location_id):
    try:
        location = LocationService.get_by_id(location_id)
        if not location:
            return jsonify({'error': 'Location not found'}), 404
        return jsonify(schema.dump(location)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in get_location: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@location_bp.route('/locations', methods=['POST'])
def create_location():
    try:
        data = request.get_json(silent=True)
        errors = schema.validate(data)
        if errors:
            return jsonify(errors), 400
        location = LocationService.create(data)
        return jsonify(schema.dump(location)), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in create_location: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@location_bp.route('/locations/<int:location_id>', methods=['PUT'])
def update_location(location_id):
    try:
        data = request.get_json(silent=True)
        errors = schema.validate(data, partial=True)
        if errors:
            return jsonify(errors), 400
        location = LocationService.update(location_id, data)
        if not location:
            return jsonify({'error': 'Location not found'}), 404
        return jsonify(schema.dump(location)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in update_location: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@location_bp.route('/locations/<int:location_id>', methods=['DELETE'])
def delete_location(location_id):
    try:
        success = LocationService.delete(location_id)
        if not success:
            return jsonify({'error': 'Location not found'}), 404
        return jsonify({'message': 'Location deleted successfully'}), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in delete_location: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
