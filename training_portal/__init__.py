# __init__.py
"""
Application factory for the training portal.
This module creates and configures the Flask application using the application factory pattern.
"""

import os
import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler

from flask import Flask, jsonify, g
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

from training_portal.config import config_by_name
from training_portal.extensions import init_extensions, db
from training_portal.utils.errors import RegistrationError, StoreUnavailableError


def setup_logging(app):
    """
    Configure structured logging for the application.

    Args:
        app: Flask application instance
    """
    # Create logs directory if it doesn't exist
    log_dir = os.path.join(app.root_path, 'logs')
    os.makedirs(log_dir, exist_ok=True)

    log_format = logging.Formatter(
        '%(asctime)s %(levelname)s %(name)s %(threadName)s : %(message)s'
    )

    # File handler with rotation
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, 'app.log'),
        maxBytes=1024 * 1024 * 10,  # 10MB
        backupCount=5
    )
    file_handler.setFormatter(log_format)
    file_handler.setLevel(logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_format)
    console_handler.setLevel(logging.DEBUG if app.debug else logging.INFO)

    app.logger.setLevel(logging.DEBUG if app.debug else logging.INFO)
    app.logger.addHandler(file_handler)
    app.logger.addHandler(console_handler)

    # Service loggers share the application handlers
    for name in ('registration_service', 'bulk_service', 'training_service', 'category_service',
                 'resource_service', 'page_service', 'user_service', 'training_state', 'store'):
        service_logger = logging.getLogger(name)
        service_logger.setLevel(logging.DEBUG if app.debug else logging.INFO)
        service_logger.addHandler(file_handler)
        service_logger.addHandler(console_handler)

    # Forcefully suppress SQLAlchemy logs
    sa_logger = logging.getLogger('sqlalchemy.engine')
    sa_logger.setLevel(logging.WARNING)
    sa_logger.propagate = False


def register_blueprints(app):
    """
    Register all application blueprints.

    Args:
        app: Flask application instance
    """
    try:
        # Import blueprints here to avoid circular imports
        from .controllers.auth import auth_bp
        from .controllers.admin import admin_bp
        from .controllers.api import api_bp

        app.register_blueprint(auth_bp, url_prefix='/auth')
        app.register_blueprint(admin_bp, url_prefix='/admin')
        app.register_blueprint(api_bp, url_prefix='/api')

        app.logger.info("All blueprints registered successfully")

    except ImportError as e:
        app.logger.error(f"Failed to import blueprint: {str(e)}")
        raise


def register_error_handlers(app):
    """
    Register global error handlers.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(404)
    def handle_404(e):
        return jsonify({'error': 'Resource not found'}), 404

    @app.errorhandler(403)
    def handle_403(e):
        return jsonify({'error': 'Access forbidden'}), 403

    @app.errorhandler(405)
    def handle_405(e):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def handle_500(e):
        app.logger.error(f"Internal server error: {str(e)}")
        return jsonify({'error': 'Internal server error'}), 500

    @app.errorhandler(StoreUnavailableError)
    def handle_store_unavailable(e):
        app.logger.error(f"Training data unavailable: {e.message}")
        return jsonify({
            'success': False,
            'error': e.message,
            'error_code': RegistrationError.STORE_ERROR
        }), 500

    @app.errorhandler(Exception)
    def handle_exception(e):
        # HTTP errors (CSRF failures, 400s raised by Flask) keep their status code
        if isinstance(e, HTTPException):
            return jsonify({'error': e.description}), e.code

        app.logger.error(f"Unhandled exception: {str(e)}", exc_info=True)
        return jsonify({
            'error': 'An unexpected error occurred',
            'message': str(e) if app.debug else 'Internal server error'
        }), 500


def register_request_hooks(app):
    """Drop any TrainingState left in g so every request loads its own."""

    @app.before_request
    def reset_training_state():
        # g belongs to the app context, which can outlive a single request
        g.pop('training_state', None)


def register_shell_context(app):
    """
    Register shell context for flask shell command.

    Args:
        app: Flask application instance
    """

    @app.shell_context_processor
    def make_shell_context():
        from training_portal.models import (
            User, Category, Training, Registration, Resource, TrainingUpdate, PageContent, PageVersion
        )
        from training_portal.services.training_state import TrainingState
        return {
            'db': db,
            'User': User,
            'Category': Category,
            'Training': Training,
            'Registration': Registration,
            'Resource': Resource,
            'TrainingUpdate': TrainingUpdate,
            'PageContent': PageContent,
            'PageVersion': PageVersion,
            'TrainingState': TrainingState,
        }


def register_health_checks(app):
    """
    Register health check endpoints.

    Args:
        app: Flask application instance
    """

    @app.route('/health')
    def health_check():
        """Basic health check endpoint."""
        return jsonify({
            'status': 'ok',
            'timestamp': datetime.now().isoformat(),
            'version': app.config.get('VERSION', '1.0.0')
        })

    @app.route('/health/database')
    def database_health_check():
        """Database health check endpoint."""
        from training_portal.extensions import check_database_health, get_connection_stats

        healthy, message = check_database_health()
        stats = get_connection_stats()

        if healthy:
            from training_portal.models import Training
            stats['training_count'] = Training.query.count()

        return jsonify({
            'status': 'healthy' if healthy else 'unhealthy',
            'message': message,
            'stats': stats,
            'timestamp': datetime.now().isoformat()
        }), 200 if healthy else 503


def create_app(config_name=None):
    """
    Application factory function.

    Args:
        config_name (str): Configuration name ('development', 'production', 'testing')

    Returns:
        Flask: Configured Flask application instance
    """
    load_dotenv()

    app = Flask(__name__)

    config_name = config_name or os.environ.get('FLASK_ENV', 'development')
    config_class = config_by_name[config_name]
    if hasattr(config_class, 'validate'):
        config_class.validate()
    app.config.from_object(config_class)

    if not app.config.get('TESTING'):
        setup_logging(app)
    app.logger.info(f"Starting application with config: {config_name}")

    init_extensions(app)

    register_blueprints(app)
    register_error_handlers(app)
    register_request_hooks(app)
    register_shell_context(app)
    register_health_checks(app)

    from .cli import register_cli_commands
    register_cli_commands(app)

    app.logger.info("Application factory completed successfully")

    return app
