"""
Core translation job modules

JobController and Translator live in booktrans.core.job_controller and
booktrans.core.translator; they depend on the persistence layer, which
itself imports from this package.
"""
from .models import WorkUnit, Job, JobStatus, StartOutcome, CacheEntry, CacheStats
from .exceptions import (
    BookTranslationError,
    ProviderUnavailableError,
    ProviderRequestError,
    InvalidJobStateError,
    CacheStorageError
)

__all__ = [
    'WorkUnit',
    'Job',
    'JobStatus',
    'StartOutcome',
    'CacheEntry',
    'CacheStats',
    'BookTranslationError',
    'ProviderUnavailableError',
    'ProviderRequestError',
    'InvalidJobStateError',
    'CacheStorageError'
]
