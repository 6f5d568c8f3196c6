import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from delivery_admin.services.scheduled_order_service import ScheduledOrderService

logger = logging.getLogger(__name__)


class SchedulerService:
    """Background activation of due scheduled orders"""

    JOB_ID = 'activate_due_scheduled_orders'

    def __init__(self):
        self.scheduler = BackgroundScheduler(timezone='UTC')
        self.app = None

    def init_app(self, app):
        self.app = app
        interval = app.config.get('SCHEDULED_ORDER_POLL_SECONDS', 30)
        self.scheduler.add_job(
            func=self.activate_due_orders,
            trigger=IntervalTrigger(seconds=interval),
            id=self.JOB_ID,
            name='Activate due scheduled orders',
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        logger.info(f"Scheduled job: scheduled order activation every {interval}s")

    def activate_due_orders(self):
        """One activation pass inside the application context"""
        try:
            with self.app.app_context():
                activated = ScheduledOrderService.activate_due()
                if activated:
                    logger.info(f"Activated {len(activated)} scheduled orders")
        except Exception as e:
            logger.error(f"Scheduled order activation failed: {e}", exc_info=True)

    def start(self):
        """Start the scheduler"""
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Scheduler service started")

    def shutdown(self):
        """Shutdown the scheduler gracefully"""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Scheduler service stopped")
