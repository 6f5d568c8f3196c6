from flask import Blueprint, request, jsonify
from delivery_admin.services.scheduled_order_service import ScheduledOrderService
from delivery_admin.services.errors import ServiceError
from delivery_admin.schemas.scheduled_order_schema import ScheduledOrderSchema, ScheduledOrderCreateSchema
from delivery_admin.extensions import db
import logging

scheduled_order_bp = Blueprint('scheduled_order', __name__)
schema = ScheduledOrderSchema(session=db.session)
schema_many = ScheduledOrderSchema(many=True, session=db.session, exclude=('items',))
create_schema = ScheduledOrderCreateSchema()

@scheduled_order_bp.route('/scheduled-orders', methods=['GET'])
def list_scheduled_orders():
    try:
        scheduled = ScheduledOrderService.get_all(status=request.args.get('status'), q=request.args.get('q'))
        return jsonify(schema_many.dump(scheduled)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_scheduled_orders: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@scheduled_order_bp.route('/scheduled-orders/<int:scheduled_order_id>', methods=['GET'])
def get_scheduled_order(scheduled_order_id):
    try:
        scheduled = ScheduledOrderService.get_by_id(scheduled_order_id)
        if not scheduled:
            return jsonify({'error': 'Scheduled order not found'}), 404
        return jsonify(schema.dump(scheduled)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in get_scheduled_order: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@scheduled_order_bp.route('/scheduled-orders', methods=['POST'])
def create_scheduled_order():
    try:
        data = request.get_json(silent=True)
        errors = create_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        scheduled = ScheduledOrderService.create(data)
        return jsonify(schema.dump(scheduled)), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in create_scheduled_order: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@scheduled_order_bp.route('/scheduled-orders/<int:scheduled_order_id>/cancel', methods=['PUT'])
def cancel_scheduled_order(scheduled_order_id):
    try:
        scheduled = ScheduledOrderService.cancel(scheduled_order_id)
        if not scheduled:
            return jsonify({'error': 'Scheduled order not found'}), 404
        return jsonify(schema.dump(scheduled)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in cancel_scheduled_order: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@scheduled_order_bp.route('/scheduled-orders/<int:scheduled_order_id>', methods=['DELETE'])
def delete_scheduled_order(scheduled_order_id):
    try:
        success = ScheduledOrderService.delete(scheduled_order_id)
        if not success:
            return jsonify({'error': 'Scheduled order not found'}), 404
        return jsonify({'message': 'Scheduled order deleted successfully'}), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in delete_scheduled_order: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@scheduled_order_bp.route('/scheduled-orders/activate-due', methods=['POST'])
def activate_due_scheduled_orders():
    """Run one activation pass now (the background poller runs the same pass)."""
    try:
        activated = ScheduledOrderService.activate_due()
        return jsonify({
            'activated': [
                {'scheduled_order_id': scheduled_id, 'order_id': order_id}
                for scheduled_id, order_id in activated
            ],
            'count': len(activated),
        }), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in activate_due_scheduled_orders: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
