"""
Data models for the translation job engine.

Provides the work unit, job aggregate and cache records shared by the
controller, the cache and the API layer.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional
import time

from .progress import compute_progress


class JobStatus(Enum):
    """Status of the active translation job."""
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"


class StartOutcome(Enum):
    """Result of JobController.start()."""
    STARTED = "started"
    ALREADY_COMPLETE = "already_complete"


@dataclass(frozen=True)
class WorkUnit:
    """One translatable sentence with its position in the book.

    Identity is positional within a job: two units may carry the same text.
    """
    text: str
    chapter_index: int = 0
    sentence_index: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WorkUnit':
        return cls(
            text=data['text'],
            chapter_index=int(data.get('chapter_index', 0)),
            sentence_index=int(data.get('sentence_index', 0))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'chapter_index': self.chapter_index,
            'sentence_index': self.sentence_index
        }


@dataclass
class Job:
    """The single active translation run.

    Attributes:
        owner_id: Cache owner (usually a book id)
        title: Human readable title
        pending_units: Units not yet attempted in the current run
        batch_size: Units per provider request
        total_units: All units handed to start(), cached ones included
        completed_units: Units already cached at start plus units attempted since
        progress_percent: Derived from completed_units / total_units
        status: Current JobStatus
        started_at: Unix timestamp of start()
        ended_at: Unix timestamp of completion, failure or pause
        error_message: Message of the exception that failed the job
        initial_pending: Pending units as computed by start(), used by resume()
    """
    owner_id: str
    title: str
    pending_units: List[WorkUnit]
    batch_size: int
    total_units: int
    completed_units: int = 0
    progress_percent: int = 0
    status: JobStatus = JobStatus.RUNNING
    started_at: float = field(default_factory=time.time)
    ended_at: Optional[float] = None
    error_message: Optional[str] = None
    initial_pending: List[WorkUnit] = field(default_factory=list)

    @property
    def initial_cache_hits(self) -> int:
        """Units that were already cached when the job started."""
        return self.total_units - len(self.initial_pending)

    def set_completed(self, completed_units: int) -> None:
        """Set completed_units (clamped to total_units) and refresh progress."""
        self.completed_units = max(0, min(completed_units, self.total_units))
        self.progress_percent = compute_progress(self.completed_units, self.total_units)

    def elapsed_seconds(self) -> float:
        end = self.ended_at if self.ended_at is not None else time.time()
        return max(0.0, end - self.started_at)

    def snapshot(self) -> 'Job':
        """Return a copy that later mutations of this job cannot reach."""
        return replace(
            self,
            pending_units=list(self.pending_units),
            initial_pending=list(self.initial_pending)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON / WebSocket serialization"""
        return {
            'owner_id': self.owner_id,
            'title': self.title,
            'batch_size': self.batch_size,
            'total_units': self.total_units,
            'completed_units': self.completed_units,
            'pending_units': len(self.pending_units),
            'progress_percent': self.progress_percent,
            'status': self.status.value,
            'started_at': self.started_at,
            'ended_at': self.ended_at,
            'elapsed_seconds': round(self.elapsed_seconds(), 3),
            'error_message': self.error_message
        }


@dataclass
class CacheEntry:
    """A persisted (owner, text) -> translation record."""
    owner_id: str
    content_hash: str
    original_text: str
    translated_text: str
    source_language: Optional[str] = None
    target_language: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'owner_id': self.owner_id,
            'content_hash': self.content_hash,
            'original_text': self.original_text,
            'translated_text': self.translated_text,
            'source_language': self.source_language,
            'target_language': self.target_language,
            'created_at': self.created_at,
            'updated_at': self.updated_at
        }


@dataclass
class CacheStats:
    """Aggregate counts over the whole cache."""
    entry_count: int = 0
    distinct_owner_count: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'entry_count': self.entry_count,
            'distinct_owner_count': self.distinct_owner_count
        }
