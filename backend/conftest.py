"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from django.test import override_settings


# ============================================================================
# SETTINGS FIXTURES
# ============================================================================

@pytest.fixture
def lenient_transitions():
    """Allow any non-terminal status change, e.g. New -> Delivered."""
    with override_settings(ORDERS_ENFORCE_STATUS_TRANSITIONS=False):
        yield


@pytest.fixture
def allow_cancel_terminal():
    with override_settings(ORDERS_ALLOW_CANCEL_TERMINAL=True):
        yield


# ============================================================================
# IMPORT ALL FIXTURES FROM core_backend/tests/fixtures.py
# ============================================================================
from core_backend.tests.fixtures import *
