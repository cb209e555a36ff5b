"""Pytest configuration and fixtures for unit tests."""

import pytest

from src.core.config import settings
from src.domain.family import Family
from src.services import family_service
from tests.unit.mocks import InMemoryDBClient


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Pins settings that would otherwise depend on the host environment.

    Password hashing uses few iterations to keep tests fast, history buckets
    are computed in UTC, and tokens are signed with a fixed key.
    """
    monkeypatch.setattr(settings, "password_hash_iterations", 1_000)
    monkeypatch.setattr(settings, "stats_timezone", "UTC")
    monkeypatch.setattr(settings, "secret_key", "test_secret_key")
    monkeypatch.setattr(settings, "token_max_age_seconds", 3600)
    return settings


@pytest.fixture
def patched_db(monkeypatch, in_memory_db):
    """Patches src.core.db_client functions to use InMemoryDBClient."""

    # Patch all db_client functions
    monkeypatch.setattr("src.core.db_client.create_record", in_memory_db.create_record)
    monkeypatch.setattr("src.core.db_client.get_record", in_memory_db.get_record)
    monkeypatch.setattr("src.core.db_client.update_record", in_memory_db.update_record)
    monkeypatch.setattr("src.core.db_client.delete_record", in_memory_db.delete_record)
    monkeypatch.setattr("src.core.db_client.list_records", in_memory_db.list_records)
    monkeypatch.setattr("src.core.db_client.get_first_record", in_memory_db.get_first_record)

    return in_memory_db


@pytest.fixture
async def family(patched_db) -> Family:
    """Registers the Smith family with members Alice and Bob."""
    return await family_service.register_family(
        name="Smith",
        code="SMITH01",
        password="hunter2",
        member_names=["Alice", "Bob"],
    )


@pytest.fixture
async def other_family(patched_db) -> Family:
    """Registers a second, unrelated family."""
    return await family_service.register_family(
        name="Jones",
        code="JONES01",
        password="letmein",
        member_names=["Carol"],
    )
