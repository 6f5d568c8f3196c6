import atexit
import importlib
import logging
import os
from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_limiter.errors import RateLimitExceeded

# Load environment variables from .env file
load_dotenv()

from delivery_admin.config import get_config
from delivery_admin.extensions import db, limiter
from delivery_admin.services.scheduler_service import SchedulerService

logger = logging.getLogger(__name__)

MODELS = [
    'location',
    'product',
    'client',
    'driver',
    'driver_product_price',
    'driver_payment',
    'payment_transaction',
    'driver_withdrawal',
    'driver_earning',
    'order',
    'order_item',
    'order_status_audit',
    'scheduled_order',
    'scheduled_order_item',
    'admin',
]

BLUEPRINTS = [
    ('location', '/api'),
    ('product', '/api'),
    ('client', '/api'),
    ('driver', '/api'),
    ('pricing', '/api'),
    ('order', '/api'),
    ('scheduled_order', '/api'),
    ('payment', '/api'),
    ('dashboard', '/api'),
    ('admin', '/api'),
]


def configure_logging(app):
    handlers = [logging.StreamHandler()]
    if not app.config.get('TESTING'):
        log_dir = app.config['LOG_DIR']
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(log_dir, 'app.log')))
    logging.basicConfig(
        level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        handlers=handlers
    )


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(error):
        logger.error(f"404 error for path: {request.path}")
        if request.path.startswith('/api/'):
            return jsonify({'error': 'API endpoint not found', 'path': request.path}), 404
        return jsonify({'error': 'Page not found', 'path': request.path}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        logger.error(f"405 Method Not Allowed for {request.method} {request.path}")
        return jsonify({'error': 'Method not allowed', 'path': request.path}), 405

    @app.errorhandler(RateLimitExceeded)
    def ratelimit_handler(e):
        logger.warning(f"Rate limit exceeded for {request.method} {request.url}")
        return jsonify({'error': 'Rate limit exceeded. Please try again later.'}), 429

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Unhandled exception for {request.method} {request.url}: {error}", exc_info=True)
        db.session.rollback()
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


def register_request_logging(app):
    @app.before_request
    def log_request_info():
        logger.debug(f"Request: {request.method} {request.url}")
        if request.is_json and request.content_length:
            logger.debug(f"JSON data: {request.get_json(silent=True)}")

    @app.after_request
    def log_response_info(response):
        logger.debug(f"Response: {response.status_code}")
        if response.status_code >= 400:
            logger.error(f"Error response: {response.status_code} for {request.method} {request.url}")
            if response.is_json:
                logger.error(f"Response data: {response.get_json()}")
        return response


def start_scheduler(app):
    scheduler_service = SchedulerService()
    scheduler_service.init_app(app)
    scheduler_service.start()
    app.extensions['scheduler_service'] = scheduler_service
    atexit.register(scheduler_service.shutdown)
    return scheduler_service


def create_app(config=None):
    """Application factory. ``config`` is a config class or an APP_ENV name."""
    if config is None or isinstance(config, str):
        config = get_config(config)

    app = Flask(__name__)
    app.config.from_object(config)

    configure_logging(app)
    logger.info("Database connected: %s", "sqlite" if "sqlite" in (app.config.get("SQLALCHEMY_DATABASE_URI") or "") else "non-sqlite")

    database_uri = app.config.get('SQLALCHEMY_DATABASE_URI') or ''
    if database_uri.startswith('sqlite:///') and ':memory:' not in database_uri:
        os.makedirs(os.path.dirname(database_uri[len('sqlite:///'):]) or '.', exist_ok=True)

    db.init_app(app)
    limiter.init_app(app)
    CORS(app, supports_credentials=True, resources={r"/api/*": {"origins": app.config.get('CORS_ORIGINS', [])}})

    for model_name in MODELS:
        importlib.import_module(f'delivery_admin.models.{model_name}')

    for blueprint_name, prefix in BLUEPRINTS:
        module = importlib.import_module(f'delivery_admin.api.{blueprint_name}')
        app.register_blueprint(getattr(module, f'{blueprint_name}_bp'), url_prefix=prefix)
        logger.debug(f"Registered blueprint: {blueprint_name} with prefix: {prefix}")

    @app.route('/api/health-check')
    def health_check():
        database_ok = db.health_check()
        status = 200 if database_ok else 503
        return jsonify({
            'status': 'ok' if database_ok else 'degraded',
            'database': 'ok' if database_ok else 'unavailable',
            'pool': db.get_pool_stats(),
            'message': 'Delivery admin backend is running.',
        }), status

    register_error_handlers(app)
    register_request_logging(app)

    with app.app_context():
        db.create_all()

    if app.config.get('SCHEDULER_ENABLED'):
        start_scheduler(app)
        logger.info("Scheduled order activation enabled")

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host=app.config.get('FLASK_HOST', '0.0.0.0'), port=app.config.get('FLASK_PORT', 5000),
            debug=app.config.get('DEBUG', False), use_reloader=False)
