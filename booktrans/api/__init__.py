"""
Web API for the translation job engine
"""
from .routes import configure_routes
from .websocket import configure_websocket_handlers

__all__ = ['configure_routes', 'configure_websocket_handlers']
