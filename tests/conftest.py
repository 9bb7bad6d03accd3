"""Shared fixtures for authorization tests."""

from datetime import datetime, timezone

import pytest

from scopeauthz.auth.models import Principal
from scopeauthz.authz.conditions import ConditionEvaluator
from scopeauthz.authz.engine import AuthzEngine, reset_authz_engine

FIXED_NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    """Engine with built-in roles and a fixed clock."""
    return AuthzEngine(condition_evaluator=ConditionEvaluator(clock=lambda: FIXED_NOW))


@pytest.fixture
def make_principal():
    """Factory for principals."""
    def _make(scopes=None, groups=None, id="u1"):
        return Principal(id=id, scopes=scopes or [], groups=groups or [])
    return _make


@pytest.fixture(autouse=True)
def _reset_singleton():
    yield
    reset_authz_engine()
