from flask import Blueprint, request, jsonify
from delivery_admin.services.order_service import OrderService
from delivery_admin.services.errors import ServiceError
from delivery_admin.schemas.order_schema import (
    OrderSchema, OrderCreateSchema, OrderStatusUpdateSchema, OrderStatusAuditSchema
)
from delivery_admin.extensions import db
import logging

order_bp = Blueprint('order', __name__)
schema = OrderSchema(session=db.session)
schema_many = OrderSchema(many=True, session=db.session, exclude=('items',))
create_schema = OrderCreateSchema()
status_schema = OrderStatusUpdateSchema()
audit_schema_many = OrderStatusAuditSchema(many=True)

@order_bp.route('/orders', methods=['GET'])
def list_orders():
    try:
        orders = OrderService.get_all(status=request.args.get('status'), q=request.args.get('q'))
        return jsonify(schema_many.dump(orders)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_orders: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@order_bp.route('/orders/<int:order_id>', methods=['GET'])
def get_order(order_id):
    try:
        order = OrderService.get_by_id(order_id)
        if not order:
            return jsonify({'error': 'Order not found'}), 404
        result = schema.dump(order)
        result['status_history'] = audit_schema_many.dump(OrderService.get_status_history(order_id))
        return jsonify(result), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in get_order: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@order_bp.route('/orders', methods=['POST'])
def create_order():
    try:
        data = request.get_json(silent=True)
        errors = create_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        order = OrderService.create(data)
        return jsonify(schema.dump(order)), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in create_order: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@order_bp.route('/orders/<int:order_id>/status', methods=['PUT'])
def update_order_status(order_id):
    try:
        data = request.get_json(silent=True)
        errors = status_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        order = OrderService.update_status(
            order_id,
            data['status'],
            expected_status=data.get('expected_status'),
            reason=data.get('reason'),
        )
        if not order:
            return jsonify({'error': 'Order not found'}), 404
        return jsonify(schema.dump(order)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in update_order_status: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@order_bp.route('/orders/<int:order_id>', methods=['DELETE'])
def delete_order(order_id):
    try:
        success = OrderService.delete(order_id)
        if not success:
            return jsonify({'error': 'Order not found'}), 404
        return jsonify({'message': 'Order deleted successfully'}), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in delete_order: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
