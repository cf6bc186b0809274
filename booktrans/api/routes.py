"""
Flask routes orchestrator for the translation API

Registers the route blueprints:

- blueprints/job_routes.py: Health check, job control and single-unit translation
- blueprints/cache_routes.py: Cache stats, lookup and purge
"""
from flask import jsonify

from .blueprints import create_job_blueprint, create_cache_blueprint


def configure_routes(app, controller):
    """
    Configure Flask routes by registering all blueprints

    Args:
        app: Flask application instance
        controller: JobController (its cache backs the cache routes)
    """
    app.register_blueprint(create_job_blueprint(controller))
    app.register_blueprint(create_cache_blueprint(controller.cache))

    _register_error_handlers(app)


def _register_error_handlers(app):
    """Register global error handlers"""

    @app.errorhandler(404)
    def route_not_found(error):
        return jsonify({"error": "API Endpoint not found"}), 404

    @app.errorhandler(500)
    def internal_server_error(error):
        return jsonify({"error": "Internal server error"}), 500
