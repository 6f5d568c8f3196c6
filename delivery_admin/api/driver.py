from flask import Blueprint, request, jsonify
from delivery_admin.services.driver_service import DriverService
from delivery_admin.services.errors import ServiceError
from delivery_admin.schemas.driver_schema import DriverSchema, DriverProductPriceSchema, ProductPriceEntrySchema
from delivery_admin.utils.search import filter_records
from delivery_admin.extensions import db
import logging

driver_bp = Blueprint('driver', __name__)
schema = DriverSchema(session=db.session)
schema_many = DriverSchema(many=True, session=db.session)
price_schema_many = DriverProductPriceSchema(many=True, session=db.session)
price_entries_schema = ProductPriceEntrySchema(many=True)

DRIVER_SEARCH_FIELDS = ('full_name', 'car_type', 'location', 'phone_number', 'status')

@driver_bp.route('/drivers', methods=['GET'])
def list_drivers():
    try:
        drivers = DriverService.get_all()
        status = request.args.get('status')
        if status:
            drivers = [d for d in drivers if d.status == status]
        drivers = filter_records(drivers, request.args.get('q'), DRIVER_SEARCH_FIELDS)
        return jsonify(schema_many.dump(drivers)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_drivers: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@driver_bp.route('/drivers/available', methods=['GET'])
def list_available_drivers():
    try:
        drivers = DriverService.get_available()
        return jsonify(schema_many.dump(drivers)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_available_drivers: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@driver_bp.route('/drivers/<int:driver_id>', methods=['GET'])
def get_driver(driver_id):
    try:
        driver = DriverService.get_by_id(driver_id)
        if not driver:
            return jsonify({'error': 'Driver not found'}), 404
        result = schema.dump(driver)
        result['product_prices'] = price_schema_many.dump(driver.product_prices)
        return jsonify(result), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in get_driver: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@driver_bp.route('/drivers', methods=['POST'])
def create_driver():
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({'error': 'Request body must be a JSON object'}), 400
        data = dict(data)
        product_prices = data.pop('product_prices', None) or []
        errors = schema.validate(data)
        price_errors = price_entries_schema.validate(product_prices)
        if price_errors:
            errors['product_prices'] = price_errors
        if errors:
            return jsonify(errors), 400
        driver = DriverService.create(data, product_prices=product_prices)
        result = schema.dump(driver)
        result['product_prices'] = price_schema_many.dump(driver.product_prices)
        return jsonify(result), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in create_driver: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@driver_bp.route('/drivers/<int:driver_id>', methods=['PUT'])
def update_driver(driver_id):
    try:
        data = request.get_json(silent=True)
        errors = schema.validate(data, partial=True)
        if errors:
            return jsonify(errors), 400
        driver = DriverService.update(driver_id, data)
        if not driver:
            return jsonify({'error': 'Driver not found'}), 404
        return jsonify(schema.dump(driver)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in update_driver: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@driver_bp.route('/drivers/<int:driver_id>', methods=['DELETE'])
def delete_driver(driver_id):
    try:
        success = DriverService.delete(driver_id)
        if not success:
            return jsonify({'error': 'Driver not found'}), 404
        return jsonify({'message': 'Driver deleted successfully'}), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in delete_driver: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@driver_bp.route('/drivers/<int:driver_id>/product-prices', methods=['GET'])
def get_driver_product_prices(driver_id):
    try:
        prices = DriverService.get_product_prices(driver_id)
        if prices is None:
            return jsonify({'error': 'Driver not found'}), 404
        return jsonify(price_schema_many.dump(prices)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in get_driver_product_prices: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@driver_bp.route('/drivers/<int:driver_id>/product-prices', methods=['PUT'])
def replace_driver_product_prices(driver_id):
    try:
        data = request.get_json(silent=True)
        # Accept either a bare list or {"product_prices": [...]}
        if isinstance(data, dict):
            data = data.get('product_prices')
        if not isinstance(data, list):
            return jsonify({'error': 'product_prices must be a list'}), 400
        errors = price_entries_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        prices = DriverService.replace_product_prices(driver_id, data)
        if prices is None:
            return jsonify({'error': 'Driver not found'}), 404
        return jsonify(price_schema_many.dump(prices)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in replace_driver_product_prices: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
