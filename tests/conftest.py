"""
Pytest configuration and shared fixtures.

Provides a fixed clock for date normalization and isolated metrics
collectors so tests never share Prometheus state.
"""

import logging

import pytest
from datetime import datetime
from prometheus_client import CollectorRegistry

from src.utils.metrics_collector import MetricsCollector, setup_blib_metrics

FIXED_NOW = datetime(2024, 3, 5, 14, 7, 9)


@pytest.fixture
def fixed_clock():
    """Clock returning 2024-03-05 14:07:09."""
    return lambda: FIXED_NOW


@pytest.fixture(autouse=True)
def restore_loggers():
    """Undo configure_logging() so caplog keeps receiving records."""
    saved = []
    for name in ("src", "scripts.blib"):
        target = logging.getLogger(name)
        saved.append((target, list(target.handlers), target.level, target.propagate))

    yield

    for target, handlers, level, propagate in saved:
        target.handlers = handlers
        target.setLevel(level)
        target.propagate = propagate


@pytest.fixture
def metrics():
    """MetricsCollector with the blib metrics on a private registry."""
    return setup_blib_metrics(MetricsCollector(namespace="blib", registry=CollectorRegistry()))
