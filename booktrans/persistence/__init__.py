"""
Persistence module for the content-addressed translation cache.
"""

from .database import Database
from .content_cache import ContentCache, content_hash

__all__ = ['Database', 'ContentCache', 'content_hash']
