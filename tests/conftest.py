from __future__ import annotations
from typing import List

import pytest

from reminders import QueueSink, ReminderRegistry
from tests.helpers import FakeTimer


@pytest.fixture
def timers():
    created: List[FakeTimer] = []

    def factory(*args, **kwargs):
        timer = FakeTimer(*args, **kwargs)
        created.append(timer)
        return timer

    factory.created = created
    return factory


@pytest.fixture
def sink():
    return QueueSink(permission="granted")


@pytest.fixture
def registry(sink, timers):
    return ReminderRegistry(sink, timer_factory=timers)
