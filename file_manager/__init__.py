"""
Flask application factory.
"""
from flask import Flask, request
from flask_cors import CORS
import logging

SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'SAMEORIGIN',
    'Referrer-Policy': 'no-referrer',
    'Content-Security-Policy': (
        "default-src 'self'; style-src 'self' 'unsafe-inline'; "
        "script-src 'self' 'unsafe-inline'; img-src 'self' data: https:; font-src 'self' https:"
    ),
}


def create_app(config_name=None, overrides=None):
    """
    Create and configure Flask application.

    Args:
        config_name: Configuration name ('development', 'production', 'testing')
        overrides: Optional mapping applied on top of the configuration

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    # Load configuration
    from file_manager.config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    if overrides:
        app.config.update(overrides)

    # Configure logging
    logging.basicConfig(
        level=logging.INFO if not app.config['DEBUG'] else logging.DEBUG,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Validate storage configuration (warn if missing, local fallback applies)
    try:
        config_class.validate_storage_config(app.config)
    except ValueError as e:
        app.logger.warning(f"Storage configuration warning: {e}")

    # Initialize database
    try:
        from file_manager.database import init_db
        init_db(app)
        app.logger.info("Database initialized successfully")
    except Exception as e:
        app.logger.error(f"Database initialization failed: {e}")
        raise

    CORS(
        app,
        resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}},
        supports_credentials=True,
        methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS'],
        allow_headers=['Content-Type', 'Authorization', 'X-Requested-With', 'x-user']
    )

    # Register blueprints
    from file_manager.routes import main, files, auth, users

    app.register_blueprint(main.bp)
    app.register_blueprint(files.bp)
    app.register_blueprint(auth.bp)
    app.register_blueprint(users.bp)

    app.logger.info("All blueprints registered")

    @app.after_request
    def set_security_headers(response):
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    # Error handlers
    @app.errorhandler(404)
    def not_found(error):
        if request.path.startswith('/api/'):
            return {'error': 'API endpoint not found'}, 404
        return {'error': 'Not found'}, 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return {'error': 'Method not allowed'}, 405

    @app.errorhandler(413)
    def payload_too_large(error):
        return {'error': f"File too large. Maximum size is {app.config['MAX_UPLOAD_MB']}MB."}, 400

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f"Internal error: {error}")
        return {'error': 'Internal server error'}, 500

    app.logger.info(f"Flask app created successfully in {app.config.get('FLASK_ENV', 'development')} mode")

    return app
