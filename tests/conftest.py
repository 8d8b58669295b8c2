import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from eventhub import EventManager  # noqa: E402
from eventhub.global_events import reset_event_manager  # noqa: E402


@pytest.fixture(autouse=True)
def _configure_logging():
    logging.basicConfig(level=logging.DEBUG)


@pytest.fixture()
def manager() -> EventManager:
    return EventManager()


@pytest.fixture()
def global_manager() -> Iterator[EventManager]:
    yield reset_event_manager()
    reset_event_manager()
