from flask import Blueprint, request, jsonify
from delivery_admin.services.pricing_service import PricingService
from delivery_admin.services.errors import ServiceError
from delivery_admin.schemas.order_schema import PricingQuoteSchema
import logging

pricing_bp = Blueprint('pricing', __name__)
quote_schema = PricingQuoteSchema()

@pricing_bp.route('/pricing/quote', methods=['POST'])
def quote():
    """Price order lines for a driver without saving anything."""
    try:
        data = request.get_json(silent=True)
        errors = quote_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        snapshot = PricingService.snapshot(data.get('driver_id'), data['items'])
        return jsonify(snapshot.to_dict()), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in quote: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
