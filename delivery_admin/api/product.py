from flask import Blueprint, request, jsonify
from delivery_admin.services.product_service import ProductService
from delivery_admin.services.errors import ServiceError
from delivery_admin.schemas.product_schema import ProductSchema
from delivery_admin.utils.search import filter_records
from delivery_admin.extensions import db
import logging

product_bp = Blueprint('product', __name__)
schema = ProductSchema(session=db.session)
schema_many = ProductSchema(many=True, session=db.session)

@product_bp.route('/products', methods=['GET'])
def list_products():
    try:
        products = ProductService.get_all()
        products = filter_records(products, request.args.get('q'), ('name', 'note'))
        return jsonify(schema_many.dump(products)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_products: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@product_bp.route('/products/<int:product_id>', methods=['GET'])
def get_product(product_id):
    try:
        product = ProductService.get_by_id(product_id)
        if not product:
            return jsonify({'error': 'Product not found'}), 404
        return jsonify(schema.dump(product)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in get_product: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@product_bp.route('/products', methods=['POST'])
def create_product():
    try:
        data = request.get_json(silent=True)
        errors = schema.validate(data)
        if errors:
            return jsonify(errors), 400
        product = ProductService.create(data)
        return jsonify(schema.dump(product)), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in create_product: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@product_bp.route('/products/<int:product_id>', methods=['PUT'])
def update_product(product_id):
    try:
        data = request.get_json(silent=True)
        errors = schema.validate(data, partial=True)
        if errors:
            return jsonify(errors), 400
        product = ProductService.update(product_id, data)
        if not product:
            return jsonify({'error': 'Product not found'}), 404
        return jsonify(schema.dump(product)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in update_product: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@product_bp.route('/products/<int:product_id>', methods=['DELETE'])
def delete_product(product_id):
    try:
        success = ProductService.delete(product_id)
        if not success:
            return jsonify({'error': 'Product not found'}), 404
        return jsonify({'message': 'Product deleted successfully'}), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in delete_product: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
