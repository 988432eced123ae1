"""
Flask application factory for MyRentCard.
"""
import logging
import os
from flask import Flask, jsonify

logger = logging.getLogger(__name__)


def create_app(config_name='default'):
    """Create and configure the Flask application."""
    # Import these inside the function to avoid import-time side effects
    from myrentcard.config import config
    from myrentcard.extensions import login_manager, migrate
    from myrentcard.models import db, User
    from myrentcard.services.verification import VerificationError

    app = Flask(__name__)

    # Load configuration
    config_class = config[config_name]
    app.config.from_object(config_class)

    # Override database URL from environment at runtime; class attributes are
    # evaluated at import time, before the platform injects variables
    database_url = os.environ.get('DATABASE_URL')
    if database_url and not app.config.get('TESTING'):
        app.config['SQLALCHEMY_DATABASE_URI'] = database_url

    # Handle PostgreSQL URL format from Heroku/Railway
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('postgres://'):
        app.config['SQLALCHEMY_DATABASE_URI'] = app.config['SQLALCHEMY_DATABASE_URI'].replace(
            'postgres://', 'postgresql://', 1
        )

    if hasattr(config_class, 'init_app'):
        config_class.init_app(app)

    # Log final DB type (not the full URL for security)
    db_uri = app.config['SQLALCHEMY_DATABASE_URI']
    db_type = 'postgresql' if 'postgresql' in db_uri else 'sqlite' if 'sqlite' in db_uri else 'unknown'
    logger.info("[APP INIT] Config: %s, DB type: %s", config_name, db_type)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Authentication required'}), 401

    # Register blueprints
    from myrentcard.api import (
        auth_api, references_api, verification_api, contacts_api,
        message_templates_api, communication_api
    )

    app.register_blueprint(auth_api.bp)
    app.register_blueprint(references_api.bp)
    app.register_blueprint(verification_api.bp)
    app.register_blueprint(contacts_api.bp)
    app.register_blueprint(message_templates_api.bp)
    app.register_blueprint(communication_api.bp)

    # Register error handlers
    @app.errorhandler(VerificationError)
    def verification_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        logger.error("Unhandled server error: %s", error)
        return jsonify({'error': 'Internal server error'}), 500

    # Database initialization
    @app.before_request
    def ensure_tables():
        """Ensure database tables exist."""
        if not app.config.get('_DB_INITIALIZED'):
            db.create_all()
            app.config['_DB_INITIALIZED'] = True

    return app


# NOTE: Do NOT create app at module level!
# The app must be created at runtime (not import time) so the platform's
# environment variables are available. Use wsgi.py as the entry point.
