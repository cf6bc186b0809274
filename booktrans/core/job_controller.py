"""
Resumable batch translation job controller.

Owns at most one Job per process. Control operations (start, pause, resume,
stop, clear_completed) are synchronous and return immediately; translation
work runs on a background thread with its own asyncio event loop.

Job state transitions and the loop's own writes are serialized by a single
re-entrant lock, and every change is broadcast to subscribers as a snapshot
taken under that lock.

Cancellation is cooperative: the loop checks its CancellationToken at window
boundaries and between per-unit fallback requests. A provider call already
in flight is allowed to finish, and its cache writes still land.
"""

import asyncio
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from booktrans.config import (
    CACHE_DB_PATH,
    DEFAULT_BATCH_SIZE,
    DEFAULT_SOURCE_LANGUAGE,
    DEFAULT_TARGET_LANGUAGE,
    WINDOW_DELAY_SECONDS,
    validate_batch_size
)
from booktrans.core.batch_parser import missing_positions, parse_indexed_lines
from booktrans.core.events import JobListener, Notifier
from booktrans.core.exceptions import ProviderUnavailableError
from booktrans.core.models import Job, JobStatus, StartOutcome, WorkUnit
from booktrans.core.translator import Translator
from booktrans.persistence.content_cache import ContentCache
from booktrans.utils.unified_logger import debug, error, info, warning, LogType
from prompts.prompts import generate_batch_prompt, generate_unit_prompt


class CancellationToken:
    """Cooperative stop signal handed to one run of the execution loop."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class RunSettings:
    """Provider and languages a job was started with; resume() keeps them."""
    translator: Translator
    source_language: str
    target_language: str
    custom_instructions: str = ""


class JobController:
    """
    Single-job scheduler driving ContentCache, Translator and Notifier.

    States: idle (no job) -> running -> paused <-> running -> completed | failed.
    stop() returns to idle from any state.
    """

    def __init__(
        self,
        cache: ContentCache,
        translator: Optional[Translator] = None,
        notifier: Optional[Notifier] = None,
        window_delay: float = WINDOW_DELAY_SECONDS,
        source_language: str = DEFAULT_SOURCE_LANGUAGE,
        target_language: str = DEFAULT_TARGET_LANGUAGE,
        custom_instructions: str = ""
    ):
        """
        Initialize controller.

        Args:
            cache: Translation cache shared by every run
            translator: Translator used for provider calls (may be set later)
            notifier: Snapshot broadcaster (a new one by default)
            window_delay: Seconds to wait between two windows
            source_language: Language of the units
            target_language: Language to translate into
            custom_instructions: Extra instructions added to every prompt
        """
        self.cache = cache
        self.notifier = notifier or Notifier()
        self.window_delay = window_delay
        self.source_language = source_language
        self.target_language = target_language
        self.custom_instructions = custom_instructions

        self._translator = translator
        self._lock = threading.RLock()
        self._job: Optional[Job] = None
        self._settings: Optional[RunSettings] = None
        self._token: Optional[CancellationToken] = None
        self._worker: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def translator(self) -> Optional[Translator]:
        """Translator for the next start(); a job keeps the one it started with."""
        return self._translator

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    def start(self, owner_id: str, title: str, units: Iterable[WorkUnit],
              batch_size: int = DEFAULT_BATCH_SIZE,
              translator: Optional[Translator] = None,
              source_language: Optional[str] = None,
              target_language: Optional[str] = None,
              custom_instructions: Optional[str] = None) -> StartOutcome:
        """
        Start a job over units, skipping those already cached for owner_id.

        A running job is stopped first. The call returns as soon as the job
        is created; translation proceeds in the background.

        Provider and language arguments become the controller's defaults, but
        only once the request is valid and any running job has been stopped.
        The new job keeps them until it ends, across pause and resume.

        Args:
            owner_id: Cache owner (usually a book id)
            title: Human readable title
            units: Work units in book order
            batch_size: Units per provider request
            translator: Translator replacing the configured one
            source_language: Language of the units
            target_language: Language to translate into
            custom_instructions: Extra instructions added to every prompt

        Returns:
            StartOutcome.STARTED, or StartOutcome.ALREADY_COMPLETE when every
            unit is cached (no job is created then)

        Raises:
            ProviderUnavailableError: No translator configured
            ValueError: batch_size below 1
        """
        batch_size = validate_batch_size(batch_size)
        units = list(units)

        with self._lock:
            if translator is None and self._translator is None:
                raise ProviderUnavailableError("No translation provider configured")

            if self._job is not None and self._job.status == JobStatus.RUNNING:
                info(f"Stopping running job '{self._job.title}' to start '{title}'")
                self._discard_job()

            if translator is not None:
                self._translator = translator
            if source_language is not None:
                self.source_language = source_language
            if target_language is not None:
                self.target_language = target_language
            if custom_instructions is not None:
                self.custom_instructions = custom_instructions

            hits = self.cache.batch_get(owner_id, [unit.text for unit in units])
            pending = [unit for unit in units if unit.text not in hits]
            cache_hits = len(units) - len(pending)

            if not pending:
                info(f"All {len(units)} units of '{title}' are already translated", LogType.CACHE)
                return StartOutcome.ALREADY_COMPLETE

            job = Job(
                owner_id=owner_id,
                title=title,
                pending_units=pending,
                batch_size=batch_size,
                total_units=len(units),
                initial_pending=list(pending)
            )
            job.set_completed(cache_hits)

            self._job = job
            self._settings = self._current_settings()
            self._token = CancellationToken()
            self._publish()

            info("Translation job started", LogType.JOB_START, {
                'title': title,
                'owner_id': owner_id,
                'total_units': job.total_units,
                'cache_hits': cache_hits,
                'pending_units': len(pending),
                'batch_size': batch_size
            })

            self._launch(job, self._token, self._settings)

        return StartOutcome.STARTED

    def pause(self) -> bool:
        """
        Suspend the running job at the next window boundary.

        Returns:
            False when there is no running job
        """
        with self._lock:
            job = self._job
            if job is None or job.status != JobStatus.RUNNING:
                return False

            self._token.cancel()
            job.status = JobStatus.PAUSED
            # marks suspension, not completion
            job.ended_at = time.time()
            self._publish()

        info(f"Job '{job.title}' paused at {job.completed_units}/{job.total_units} units")
        return True

    def resume(self) -> bool:
        """
        Continue a paused job from the first unit not yet attempted.

        Returns:
            False when there is no paused job
        """
        with self._lock:
            job = self._job
            if job is None or job.status != JobStatus.PAUSED:
                return False

            attempted_since_start = job.completed_units - job.initial_cache_hits
            job.pending_units = list(job.initial_pending[attempted_since_start:])
            job.status = JobStatus.RUNNING
            job.ended_at = None

            self._token = CancellationToken()
            self._publish()

            info(f"Job '{job.title}' resumed with {len(job.pending_units)} units left")
            self._launch(job, self._token, self._settings)

        return True

    def stop(self) -> bool:
        """
        Cancel the job and forget it. A stopped job cannot be resumed.

        Returns:
            False when there was no job
        """
        with self._lock:
            if self._job is None:
                return False
            self._discard_job()
        return True

    def clear_completed(self) -> bool:
        """
        Forget a completed job.

        Returns:
            False unless the current job is completed
        """
        with self._lock:
            job = self._job
            if job is None or job.status != JobStatus.COMPLETED:
                return False

            self._job = None
            self._settings = None
            self._token = None
            self._publish()

        debug(f"Completed job '{job.title}' cleared")
        return True

    def get_current(self) -> Optional[Job]:
        """Snapshot of the current job, or None when idle."""
        with self._lock:
            return self._job.snapshot() if self._job else None

    def subscribe(self, callback: JobListener) -> Callable[[], None]:
        """
        Receive the current snapshot now and every later one.

        Returns:
            Function removing the subscription
        """
        with self._lock:
            return self.notifier.subscribe(callback)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the latest execution loop has exited.

        Returns:
            True if no loop is running anymore
        """
        with self._lock:
            worker = self._worker
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()

    # ------------------------------------------------------------------
    # Single-unit translation
    # ------------------------------------------------------------------

    async def translate_unit_async(self, owner_id: str, text: str) -> str:
        """
        Translate one text, reading from and writing to the cache.

        Raises:
            ProviderUnavailableError: Cache miss and no translator configured
            ProviderRequestError: Provider gave no usable answer
        """
        entry = self.cache.get(owner_id, text)
        if entry:
            return entry.translated_text

        with self._lock:
            if self._translator is None:
                raise ProviderUnavailableError("No translation provider configured")
            settings = self._current_settings()

        translated = await self._translate_single(settings, text)
        self._store(owner_id, text, translated, settings)
        return translated

    def translate_unit(self, owner_id: str, text: str) -> str:
        """Blocking variant of translate_unit_async, for callers without a loop."""
        return asyncio.run(self.translate_unit_async(owner_id, text))

    # ------------------------------------------------------------------
    # Execution loop
    # ------------------------------------------------------------------

    def _launch(self, job: Job, token: CancellationToken, settings: RunSettings) -> None:
        worker = threading.Thread(
            target=self._run_worker,
            args=(job, token, settings),
            name=f"translation-job-{job.owner_id}",
            daemon=True
        )
        self._worker = worker
        worker.start()

    def _run_worker(self, job: Job, token: CancellationToken, settings: RunSettings) -> None:
        """Thread entry point: run the loop on a fresh event loop."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            loop.run_until_complete(self._execute(job, token, settings))
        except Exception as e:
            self._fail(job, token, e)
        finally:
            loop.close()

    def _owns(self, job: Job, token: CancellationToken) -> bool:
        """True while this run is still the one driving the current job."""
        return self._job is job and self._token is token

    async def _execute(self, job: Job, token: CancellationToken, settings: RunSettings) -> None:
        with self._lock:
            units = list(job.pending_units)
            batch_size = job.batch_size

        attempted = 0
        for start in range(0, len(units), batch_size):
            with self._lock:
                if token.cancelled or not self._owns(job, token) or job.status != JobStatus.RUNNING:
                    debug(f"Loop for '{job.title}' stopped after {attempted} units")
                    return

            window = units[start:start + batch_size]
            await self._process_window(job.owner_id, window, settings, token)

            with self._lock:
                # stopped, replaced or resumed while the window was in flight
                if not self._owns(job, token):
                    return
                job.pending_units = units[start + len(window):]
                job.set_completed(job.completed_units + len(window))
                self._publish()
                snapshot_done, snapshot_total = job.completed_units, job.total_units
                progress = job.progress_percent

            attempted += len(window)
            info("Window done", LogType.PROGRESS, {
                'percentage': progress,
                'current': snapshot_done,
                'total': snapshot_total
            })

            if start + batch_size < len(units):
                await asyncio.sleep(self.window_delay)

        with self._lock:
            if not self._owns(job, token) or token.cancelled or job.status != JobStatus.RUNNING:
                return
            job.status = JobStatus.COMPLETED
            job.set_completed(job.total_units)
            job.ended_at = time.time()
            self._publish()

        info(f"Translation of '{job.title}' completed", LogType.JOB_END, {
            'elapsed_seconds': job.elapsed_seconds(),
            'attempted_this_run': attempted
        })

    async def _process_window(self, owner_id: str, window: List[WorkUnit],
                              settings: RunSettings, token: CancellationToken) -> None:
        """Translate one window in a single request, falling back to one request per unit."""
        texts = [unit.text for unit in window]
        try:
            translations = await self._translate_batch(settings, texts)
        except Exception as e:
            warning(f"Batch request for {len(window)} units failed, retrying unit by unit: {e}")
            await self._fallback(owner_id, texts, settings, token)
            return

        for position, translated in translations.items():
            self._store(owner_id, texts[position], translated, settings)

        missing = missing_positions(translations, len(texts))
        if missing:
            debug(f"{len(missing)}/{len(texts)} units missing from batch answer, left untranslated", LogType.CACHE)

    async def _fallback(self, owner_id: str, texts: List[str],
                        settings: RunSettings, token: CancellationToken) -> None:
        for text in texts:
            if token.cancelled:
                debug("Fallback aborted by cancellation")
                return
            try:
                translated = await self._translate_single(settings, text)
            except Exception as e:
                warning(f"Unit translation failed, skipping: {e}", LogType.ERROR_DETAIL, {
                    'details': repr(e),
                    'unit': text
                })
                continue
            self._store(owner_id, text, translated, settings)

    async def _translate_batch(self, settings: RunSettings, texts: List[str]) -> Dict[int, str]:
        prompt_pair = generate_batch_prompt(
            texts,
            source_language=settings.source_language,
            target_language=settings.target_language,
            custom_instructions=settings.custom_instructions
        )
        response = await settings.translator.completions([
            {'role': 'system', 'content': prompt_pair.system},
            {'role': 'user', 'content': prompt_pair.user}
        ])
        return parse_indexed_lines(response, len(texts))

    async def _translate_single(self, settings: RunSettings, text: str) -> str:
        prompt_pair = generate_unit_prompt(
            text,
            source_language=settings.source_language,
            target_language=settings.target_language,
            custom_instructions=settings.custom_instructions
        )
        return await settings.translator.completions([
            {'role': 'system', 'content': prompt_pair.system},
            {'role': 'user', 'content': prompt_pair.user}
        ])

    def _store(self, owner_id: str, original: str, translated: Optional[str],
               settings: RunSettings) -> None:
        """Persist a translation unless it is empty or identical to the original."""
        if not translated or translated == original:
            return
        self.cache.put(owner_id, original, translated, settings.source_language, settings.target_language)

    def _fail(self, job: Job, token: CancellationToken, exc: Exception) -> None:
        with self._lock:
            if not self._owns(job, token):
                warning(f"Discarded job '{job.title}' raised after it was replaced: {exc}")
                return
            job.status = JobStatus.FAILED
            job.error_message = str(exc)
            job.ended_at = time.time()
            self._publish()

        error(f"Translation of '{job.title}' failed", LogType.ERROR_DETAIL, {'details': repr(exc)})

    # ------------------------------------------------------------------
    # Helpers (call with the lock held)
    # ------------------------------------------------------------------

    def _discard_job(self) -> None:
        job = self._job
        if self._token is not None:
            self._token.cancel()
        self._job = None
        self._settings = None
        self._token = None
        self._publish()
        info(f"Job '{job.title}' stopped at {job.completed_units}/{job.total_units} units", LogType.JOB_END, {
            'elapsed_seconds': job.elapsed_seconds()
        })

    def _current_settings(self) -> RunSettings:
        return RunSettings(
            translator=self._translator,
            source_language=self.source_language,
            target_language=self.target_language,
            custom_instructions=self.custom_instructions
        )

    def _publish(self) -> None:
        self.notifier.publish(self._job.snapshot() if self._job else None)


# Global controller instance
_job_controller: Optional[JobController] = None
_controller_lock = threading.Lock()


def get_job_controller(cache: Optional[ContentCache] = None, **kwargs) -> JobController:
    """
    Get the process-wide controller, creating it on first use.

    Args:
        cache: Cache for the first creation (a default ContentCache otherwise)
        **kwargs: Extra JobController arguments for the first creation
    """
    global _job_controller
    with _controller_lock:
        if _job_controller is None:
            _job_controller = JobController(cache or ContentCache(CACHE_DB_PATH), **kwargs)
        return _job_controller
