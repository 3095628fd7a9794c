"""Configuration module for the Flask application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '1') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Bearer tokens (PyJWT, HS256)
    JWT_SECRET = os.getenv('JWT_SECRET', 'pos-system-secret-change-in-production')
    JWT_ALGORITHM = 'HS256'
    TOKEN_TTL_HOURS = int(os.getenv('TOKEN_TTL_HOURS', '24'))

    # Database
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///coffee_shop.db')
    if DATABASE_URL.startswith('postgres://'):
        DATABASE_URL = DATABASE_URL.replace('postgres://', 'postgresql://', 1)

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'

    # Create tables and seed reference data on start-up
    AUTO_INIT_DB = os.getenv('AUTO_INIT_DB', 'true').lower() == 'true'

    # Seed accounts, created only while the users table is empty
    SEED_ADMIN_USERNAME = os.getenv('SEED_ADMIN_USERNAME', 'admin')
    SEED_ADMIN_PASSWORD = os.getenv('SEED_ADMIN_PASSWORD', '123')
    SEED_ADMIN_NAME = os.getenv('SEED_ADMIN_NAME', 'Haidar')
    SEED_CASHIER_USERNAME = os.getenv('SEED_CASHIER_USERNAME', 'cashier')
    SEED_CASHIER_PASSWORD = os.getenv('SEED_CASHIER_PASSWORD', '000')

    # Display currency
    DEFAULT_EXCHANGE_RATE = os.getenv('DEFAULT_EXCHANGE_RATE', '89500')

    # Upload constraints
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'uploads'))
    MAX_CONTENT_LENGTH = int(os.getenv('MAX_UPLOAD_SIZE', 5 * 1024 * 1024))  # 5MB
    ALLOWED_EXTENSIONS = {'jpg', 'jpeg', 'png', 'gif', 'webp'}

    # Live order events (Redis pub/sub fanned out as server-sent events)
    REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
    EVENTS_CHANNEL = os.getenv('EVENTS_CHANNEL', 'cafepos:orders')
    SSE_KEEPALIVE_SECONDS = int(os.getenv('SSE_KEEPALIVE_SECONDS', '15'))

    # Error tracking
    SENTRY_DSN = os.getenv('SENTRY_DSN')


class TestConfig(Config):
    """Configuration used by the test suite (in-memory SQLite)."""

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ECHO = False
    AUTO_INIT_DB = True
    JWT_SECRET = 'test-secret-key-for-the-test-suite-only'
    SENTRY_DSN = None
