from flask import Blueprint, jsonify
from delivery_admin.services.dashboard_service import DashboardService
from delivery_admin.services.errors import ServiceError
import logging

dashboard_bp = Blueprint('dashboard', __name__)

@dashboard_bp.route('/dashboard/stats', methods=['GET'])
def get_stats():
    try:
        return jsonify(DashboardService.get_stats()), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in get_stats: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
