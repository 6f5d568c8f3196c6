import os
from pathlib import Path


def _env_flag(name, default='false'):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration - shared across all environments"""

    # Security
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Timezone used to interpret and render scheduled delivery times
    REFERENCE_TIMEZONE = os.environ.get('REFERENCE_TIMEZONE', 'Asia/Riyadh')

    # Scheduled order activation
    SCHEDULER_ENABLED = _env_flag('SCHEDULER_ENABLED', 'true')
    SCHEDULED_ORDER_POLL_SECONDS = int(os.environ.get('SCHEDULED_ORDER_POLL_SECONDS', '30'))

    # Rate limiting
    RATELIMIT_ENABLED = _env_flag('RATELIMIT_ENABLED', 'true')
    RATELIMIT_DEFAULT = os.environ.get('RATELIMIT_DEFAULT', '1000 per day;500 per hour')
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')

    # CORS
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', 'http://localhost:5173,http://localhost:3000').split(',') if o.strip()]

    # Logging
    BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR', os.path.join(BASE_DIR, 'logs'))

    STORAGE_PATH = os.environ.get(
        'STORAGE_PATH',
        str(Path(__file__).resolve().parents[1] / "delivery-admin-storage" / "database"))


class DevConfig(Config):
    """Development configuration"""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')
    FLASK_HOST = '0.0.0.0'
    FLASK_PORT = int(os.environ.get('FLASK_PORT', '5000'))

    DB_PATH = os.path.join(Config.STORAGE_PATH, 'delivery_admin.db')
    SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI', f"sqlite:///{DB_PATH}")


class TestConfig(Config):
    """Test configuration - in-memory database, no background work"""
    TESTING = True
    DEBUG = False
    LOG_LEVEL = 'WARNING'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SCHEDULER_ENABLED = False
    RATELIMIT_ENABLED = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    # Production: Use IPv6 dual-stack on Linux server
    FLASK_HOST = '::'
    FLASK_PORT = int(os.environ.get('FLASK_PORT', '5000'))

    # Production database - MUST be set via environment
    SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI')
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': 3600,
        'pool_pre_ping': True,
    }


config_by_name = {
    'development': DevConfig,
    'testing': TestConfig,
    'production': ProductionConfig,
}


def get_config(name=None):
    name = (name or os.environ.get('APP_ENV', 'development')).lower()
    return config_by_name.get(name, DevConfig)
