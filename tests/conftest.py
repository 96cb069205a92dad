"""Shared test harness wiring."""

from __future__ import annotations

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo global structlog configuration (e.g. from CLI invocations) between tests.

    configure_logging binds the logger to the sys.stderr of the moment, which under
    pytest is a per-test capture stream that is closed afterwards.
    """
    yield
    structlog.reset_defaults()
