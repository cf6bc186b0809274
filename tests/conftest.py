"""
Pytest configuration and fixtures for all tests.

This file is automatically loaded by pytest and provides common fixtures
and configuration for all test modules.
"""

import re
import sys
import threading
import time
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Import pytest for fixtures
import pytest

from booktrans.config import INPUT_TAG_IN, INPUT_TAG_OUT, TRANSLATE_TAG_IN, TRANSLATE_TAG_OUT
from booktrans.core.job_controller import JobController
from booktrans.core.llm.base import LLMProvider, LLMResponse
from booktrans.core.models import WorkUnit
from booktrans.core.translator import Translator
from booktrans.persistence import ContentCache


def fake_translation(text):
    """Deterministic stand-in for a real translation."""
    return f"T({text})"


class ScriptedProvider(LLMProvider):
    """
    In-process provider answering like a well-behaved model.

    Attributes:
        batch_calls: Text lists of every batch request, in order
        unit_calls: Text of every single-unit request, in order
        fail_batch: Raise on every batch request
        fail_units: Texts whose single-unit request returns no answer
        batch_answer: Optional callable(texts) -> raw answer body for batch requests
        gate: Optional threading.Event every request waits on
    """

    def __init__(self):
        super().__init__("scripted-model")
        self.batch_calls = []
        self.unit_calls = []
        self.fail_batch = False
        self.fail_units = set()
        self.batch_answer = None
        self.gate = None
        self.system_prompts = []

    async def generate(self, prompt, timeout=None, system_prompt=None):
        self.system_prompts.append(system_prompt)
        body = prompt.split(INPUT_TAG_IN, 1)[1].split(INPUT_TAG_OUT, 1)[0].strip()

        if prompt.startswith("# SENTENCES TO TRANSLATE"):
            texts = [re.sub(r'^\[\d+\]\s*', '', line) for line in body.splitlines()]
            self.batch_calls.append(texts)
            self._wait_for_gate()
            if self.fail_batch:
                raise RuntimeError("batch request failed")
            if self.batch_answer is not None:
                answer = self.batch_answer(texts)
            else:
                answer = "\n".join(f"[{i}] {fake_translation(t)}" for i, t in enumerate(texts, start=1))
        else:
            self.unit_calls.append(body)
            self._wait_for_gate()
            if body in self.fail_units:
                return None
            answer = fake_translation(body)

        return LLMResponse(content=f"{TRANSLATE_TAG_IN}\n{answer}\n{TRANSLATE_TAG_OUT}")

    def _wait_for_gate(self):
        if self.gate is not None:
            self.gate.wait(timeout=5)


def make_units(texts, chapter_index=0):
    return [WorkUnit(text=t, chapter_index=chapter_index, sentence_index=i) for i, t in enumerate(texts)]


@pytest.fixture
def cache(tmp_path):
    """ContentCache on a temporary SQLite file."""
    content_cache = ContentCache(str(tmp_path / "translations.db"))
    yield content_cache
    content_cache.close()


@pytest.fixture
def provider():
    return ScriptedProvider()


@pytest.fixture
def translator(provider):
    return Translator(provider)


@pytest.fixture
def controller(cache, translator):
    """JobController without delay between windows."""
    job_controller = JobController(cache, translator, window_delay=0)
    yield job_controller
    job_controller.stop()
    job_controller.wait(timeout=5)


@pytest.fixture
def gate():
    """Unset event; set it to let the scripted provider answer."""
    event = threading.Event()
    yield event
    event.set()


def wait_until(predicate, timeout=5.0, interval=0.01):
    """Poll predicate until it holds; fail the test on timeout."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            pytest.fail("condition not reached in time")
        time.sleep(interval)
