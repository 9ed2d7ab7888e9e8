from flask import Flask, jsonify
from config import config
from app.extensions import cors, celery, init_celery, init_context
import os
import logging


def create_app(config_name=None, db=None, clock=None):
    """
    Application factory pattern

    db and clock override the MongoDB database and the time source, which
    scripts and tests use to run against a prepared database.
    """
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    configure_logging(app)

    # Initialize extensions
    init_context(app, db=db, clock=clock)
    cors.init_app(app, resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}})

    # Register tasks and their schedule on the shared Celery instance
    from app.tasks.status_tasks import status_check_beat_schedule
    init_celery(app, celery)
    celery.conf.beat_schedule = status_check_beat_schedule(app.config)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'Liynmar Tutoring Back Office API',
            'version': '1.0.0'
        })

    return app, celery


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    app.logger.setLevel(level)


def register_blueprints(app):
    """Register all blueprints"""
    from app.routes.bookings import bookings_bp
    from app.routes.teachers import teachers_bp
    from app.routes.status import status_bp

    app.register_blueprint(bookings_bp)
    app.register_blueprint(teachers_bp)
    app.register_blueprint(status_bp)


def register_error_handlers(app):
    """Register error handlers"""

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Resource not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({'error': 'Internal server error'}), 500

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({'error': 'Bad request'}), 400
