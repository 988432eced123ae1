"""
Configuration management for MyRentCard.
"""
import hashlib
import logging
import os
from dotenv import load_dotenv

load_dotenv()


def _get_secret_key():
    """Session signing key from SECRET_KEY or FLASK_SECRET_KEY; blank values count as unset."""
    for name in ("SECRET_KEY", "FLASK_SECRET_KEY"):
        val = os.environ.get(name)
        if val and isinstance(val, str) and val.strip():
            return val.strip()
    return None


def _production_secret_fallback():
    """Key derived from DATABASE_URL; every worker of one deployment derives the same value."""
    url = os.environ.get("DATABASE_URL") or ""
    if not url:
        return None
    return hashlib.sha256(url.encode()).hexdigest()


def _int_env(name, default):
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        logging.warning("Invalid integer for %s; using %s", name, default)
        return default


class Config:
    """Base configuration."""
    SECRET_KEY = _get_secret_key()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }

    # Public URL used to build verification links
    APP_BASE_URL = os.environ.get('APP_BASE_URL', 'http://localhost:5000').rstrip('/')

    # Reference verification links expire after 24 hours
    VERIFICATION_TOKEN_TTL_HOURS = _int_env('VERIFICATION_TOKEN_TTL_HOURS', 24)

    # E-mail delivery (Resend)
    RESEND_API_KEY = os.environ.get('RESEND_API_KEY')
    EMAIL_FROM = os.environ.get('EMAIL_FROM', 'MyRentCard <noreply@myrentcard.com>')

    # Client library defaults
    MYRENTCARD_API_URL = os.environ.get('MYRENTCARD_API_URL', 'http://localhost:5000').rstrip('/')
    API_TIMEOUT = _int_env('API_TIMEOUT', 30)


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    _db_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'instance', 'myrentcard.db')
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        f'sqlite:///{_db_path}'
    )
    if not Config.SECRET_KEY:
        SECRET_KEY = "dev-secret-key-change-in-production"


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///instance/myrentcard.db')
    if not Config.SECRET_KEY:
        _fallback = _production_secret_fallback()
        if _fallback:
            SECRET_KEY = _fallback
            logging.warning(
                "SECRET_KEY not set; using deterministic key from DATABASE_URL. "
                "Set SECRET_KEY for stronger security."
            )
        else:
            SECRET_KEY = "production-change-me-set-SECRET_KEY"

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 86400  # 24 hours in seconds

    @staticmethod
    def init_app(app):
        app.config['SESSION_COOKIE_SECURE'] = os.environ.get('SESSION_COOKIE_SECURE', 'false').lower() == 'true'
        app.config['SESSION_COOKIE_PATH'] = '/'


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    RESEND_API_KEY = None
    APP_BASE_URL = 'http://testserver'
    VERIFICATION_TOKEN_TTL_HOURS = 24
    if not Config.SECRET_KEY:
        SECRET_KEY = "test-secret-key"


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
