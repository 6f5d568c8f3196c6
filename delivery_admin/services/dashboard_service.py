import logging
from sqlalchemy import func
from delivery_admin.extensions import db
from delivery_admin.models.client import Client
from delivery_admin.models.driver import Driver, DriverStatus
from delivery_admin.models.driver_payment import DriverPayment
from delivery_admin.models.order import Order, OrderStatus
from delivery_admin.models.product import Product
from delivery_admin.services.errors import ServiceError
from delivery_admin.services.pricing_service import to_money

class DashboardService:
    @staticmethod
    def get_stats():
        """Headline counts and money totals for the dashboard."""
        try:
            status_counts = dict(
                db.session.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
            )
            revenue = (db.session.query(func.coalesce(func.sum(Order.total_amount), 0))
                       .filter(Order.status == OrderStatus.COMPLETED.value)
                       .scalar())
            pending = db.session.query(func.coalesce(func.sum(DriverPayment.pending_amount), 0)).scalar()
            return {
                'total_products': Product.query_active().count(),
                'total_drivers': Driver.query_active().count(),
                'available_drivers': Driver.query_active().filter_by(status=DriverStatus.AVAILABLE.value).count(),
                'total_clients': Client.query_active().count(),
                'total_orders': sum(status_counts.values()),
                'new_orders': status_counts.get(OrderStatus.NEW.value, 0),
                'in_progress_orders': status_counts.get(OrderStatus.IN_PROGRESS.value, 0),
                'completed_orders': status_counts.get(OrderStatus.COMPLETED.value, 0),
                'cancelled_orders': status_counts.get(OrderStatus.CANCELLED.value, 0),
                'total_revenue': float(to_money(revenue or 0)),
                'pending_payments': float(to_money(pending or 0)),
            }
        except Exception as e:
            logging.error(f"Error computing dashboard stats: {e}", exc_info=True)
            raise ServiceError("Could not load dashboard statistics. Please try again later.")
