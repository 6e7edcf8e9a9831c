"""
Tests for utils/http.py — pooled session with retry adapter.
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.http import RetryStrategy, build_session


def test_retry_defaults():
    retry = RetryStrategy().get_retry_object()
    assert retry.total == 3
    assert retry.backoff_factor == 0.5
    assert 503 in retry.status_forcelist


def test_only_idempotent_methods_retried():
    retry = RetryStrategy().get_retry_object()
    assert "GET" in retry.allowed_methods
    assert "POST" not in retry.allowed_methods


def test_custom_status_list():
    retry = RetryStrategy(max_retries=1, status_forcelist=[502]).get_retry_object()
    assert retry.total == 1
    assert list(retry.status_forcelist) == [502]


def test_session_mounts_adapter_for_both_schemes():
    session = build_session(RetryStrategy(max_retries=2))
    for prefix in ("http://", "https://"):
        assert session.get_adapter(prefix + "example.test").max_retries.total == 2
