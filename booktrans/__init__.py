"""
booktrans - resumable batch translation of book sentences through an LLM,
backed by a content-addressed translation cache.
"""

__version__ = "1.0.0"
