"""
Production WSGI entry point for the MyRentCard API.

The app is built on first request rather than at import, so the platform's
environment variables (DATABASE_URL, SECRET_KEY, RESEND_API_KEY) are in place.
"""
import os

_app = None


def get_app():
    """Get or create the Flask app instance."""
    global _app
    if _app is None:
        from myrentcard import create_app
        from myrentcard.config import config

        config_name = os.environ.get('MYRENTCARD_CONFIG') or os.environ.get('FLASK_ENV', 'production')
        if config_name not in config:
            config_name = 'production'
        _app = create_app(config_name)
    return _app


def app(environ, start_response):
    """WSGI application entry point (gunicorn wsgi:app)."""
    return get_app()(environ, start_response)


if __name__ == '__main__':
    get_app().run(port=int(os.environ.get('PORT', 5000)))
