"""
Flask web server for the translation job API with WebSocket support
"""
import sys
import logging
from datetime import datetime
from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Reduce verbosity of werkzeug (Flask HTTP server logs)
logging.getLogger('werkzeug').setLevel(logging.WARNING)

from booktrans.config import (
    API_ENDPOINT,
    CACHE_DB_PATH,
    DEFAULT_MODEL,
    HOST,
    PORT,
    TranslationConfig
)
from booktrans.api import configure_routes, configure_websocket_handlers
from booktrans.core.job_controller import get_job_controller
from booktrans.core.translator import Translator
from booktrans.persistence import ContentCache
from booktrans.utils.unified_logger import setup_web_logger


def validate_configuration():
    """Validate required configuration before starting server"""
    issues = []

    if not PORT or not isinstance(PORT, int):
        issues.append("PORT must be a valid integer")
    if not DEFAULT_MODEL:
        issues.append("DEFAULT_MODEL must be configured")
    if not API_ENDPOINT:
        issues.append("API_ENDPOINT must be configured")

    if issues:
        logger.error("=" * 70)
        logger.error("CONFIGURATION ERROR")
        for issue in issues:
            logger.error(f"   - {issue}")
        logger.error("Create a .env file from .env.example and restart the application")
        logger.error("=" * 70)
        raise ValueError("Configuration validation failed. See errors above.")

    logger.info("Configuration validated successfully")


def create_app(controller=None):
    """
    Build the Flask app and its SocketIO server.

    Args:
        controller: JobController to expose (the process-wide one by default)

    Returns:
        (app, socketio)
    """
    if controller is None:
        default_config = TranslationConfig(interface_type="web")
        controller = get_job_controller(
            ContentCache(CACHE_DB_PATH),
            translator=Translator.from_config(default_config),
            source_language=default_config.source_language,
            target_language=default_config.target_language
        )

    app = Flask(__name__)
    CORS(app)
    socketio = SocketIO(app, cors_allowed_origins="*")

    setup_web_logger(lambda log_entry: socketio.emit('log', log_entry, namespace='/'))

    configure_routes(app, controller)
    configure_websocket_handlers(socketio, controller)
    return app, socketio


if __name__ == '__main__':
    try:
        validate_configuration()
    except ValueError:
        sys.exit(1)

    app, socketio = create_app()

    logger.info("=" * 60)
    logger.info(f"BOOK TRANSLATION JOB SERVER (Version {datetime.now().strftime('%Y%m%d-%H%M')})")
    logger.info("=" * 60)
    logger.info(f"   - Default Ollama Endpoint: {API_ENDPOINT}")
    logger.info(f"   - Translation cache: {CACHE_DB_PATH}")
    logger.info(f"   - API: http://{HOST}:{PORT}/api/")
    logger.info(f"   - Health Check: http://{HOST}:{PORT}/api/health")
    logger.info("Press Ctrl+C to stop the server")

    if HOST == '0.0.0.0':
        logger.warning("Server is binding to 0.0.0.0 (all network interfaces)")
        logger.warning("   For production, use a proper WSGI server like gunicorn:")
        logger.warning("   gunicorn --worker-class eventlet -w 1 --bind 0.0.0.0:5000 'translation_api:create_app()[0]'")

    socketio.run(app, debug=False, host=HOST, port=PORT, allow_unsafe_werkzeug=True)
