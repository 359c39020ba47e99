# -*- coding: utf-8 -*-

import pytest

from settle import ManualScheduler, ThreadScheduler, set_scheduler


@pytest.fixture(autouse=True)
def thread_scheduler():
    """Install a new ThreadScheduler as default scheduler during the test."""
    scheduler = ThreadScheduler(name='test')
    previous = set_scheduler(scheduler)
    yield scheduler
    set_scheduler(previous)
    scheduler.shutdown()


@pytest.fixture
def manual_scheduler(thread_scheduler):
    """Install a ManualScheduler as default scheduler during the test."""
    scheduler = ManualScheduler()
    set_scheduler(scheduler)
    return scheduler
