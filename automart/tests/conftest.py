from __future__ import annotations

import pytest

from automart.analytics.feedback import clear_feedback
from automart.analytics.store import clear_events
from automart.behavior.store import InMemoryBehaviorStore, set_behavior_store
from automart.inventory.data_store import set_dataframe
from automart.recommendations.cache import clear_cache


@pytest.fixture(autouse=True)
def _reset_state():
    clear_cache()
    clear_events()
    clear_feedback()
    set_dataframe(None)
    store = InMemoryBehaviorStore()
    set_behavior_store(store)
    yield store


@pytest.fixture
def store(_reset_state) -> InMemoryBehaviorStore:
    return _reset_state
