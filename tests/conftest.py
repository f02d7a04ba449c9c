"""Shared fixtures for ganttcore tests."""

import pytest
from datetime import datetime

from ganttcore.models import Task


@pytest.fixture
def make_task():
    """Factory for tasks with sensible defaults; dates given as (y, m, d) tuples or datetimes."""
    def _make(id="1", start=(2024, 6, 10), end=(2024, 6, 15), **kwargs):
        start_date = start if isinstance(start, datetime) else datetime(*start)
        end_date = end if isinstance(end, datetime) else datetime(*end)
        fields = dict(name=f"Task {id}", color="#3b82f6", position=0)
        fields.update(kwargs)
        return Task(id=id, start_date=start_date, end_date=end_date, **fields)
    return _make
