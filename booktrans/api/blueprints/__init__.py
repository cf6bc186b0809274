"""
API Routes
"""
from .job_routes import create_job_blueprint
from .cache_routes import create_cache_blueprint

__all__ = [
    'create_job_blueprint',
    'create_cache_blueprint'
]
