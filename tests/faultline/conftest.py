"""Shared fixtures for faultline tests."""

from __future__ import annotations

import logging
from typing import Iterator

import pytest

from packages.faultline import MAX_STACK_FRAMES, clear_global_classifier, set_frame_limit
from packages.faultline.logging import clear_context


@pytest.fixture(autouse=True)
def _reset_process_state() -> Iterator[None]:
    """Keep process-wide classifier, frame limit and log context per test."""
    clear_global_classifier()
    clear_context()
    set_frame_limit(MAX_STACK_FRAMES)
    yield
    clear_global_classifier()
    clear_context()
    set_frame_limit(MAX_STACK_FRAMES)


@pytest.fixture
def restore_root_logging() -> Iterator[logging.Logger]:
    """Restore root logger handlers and level after a test reconfigures them."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
