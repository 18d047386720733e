"""Pytest fixtures for opportunity-directory tests."""

from pathlib import Path

import pytest

from opportunity_directory.api import Directory
from opportunity_directory.auth import AuthorizationContext
from opportunity_directory.models.profile import Role


@pytest.fixture
def temp_db(tmp_path: Path) -> Path:
    """Temporary database path for isolated tests."""
    return tmp_path / "directory.db"


@pytest.fixture
def directory(temp_db: Path) -> Directory:
    """Directory wired to a temporary database and the local session provider."""
    return Directory(temp_db)


@pytest.fixture
def admin(directory: Directory) -> AuthorizationContext:
    directory.profiles.ensure("admin-1", full_name="Admin", email="admin@example.com")
    profile = directory.profiles.set_role("admin-1", Role.ADMIN)
    return AuthorizationContext.for_profile(profile)


@pytest.fixture
def student(directory: Directory) -> AuthorizationContext:
    profile = directory.profiles.ensure("student-1", full_name="Sara", email="sara@example.com")
    return AuthorizationContext.for_profile(profile)


@pytest.fixture
def other_student(directory: Directory) -> AuthorizationContext:
    profile = directory.profiles.ensure("student-2", full_name="Omar", email="omar@example.com")
    return AuthorizationContext.for_profile(profile)


@pytest.fixture
def anonymous() -> AuthorizationContext:
    return AuthorizationContext.anonymous()
