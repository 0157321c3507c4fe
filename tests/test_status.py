"""Tests for the health and build-info endpoints."""

import os
from unittest.mock import patch

import pytest

from app.config.settings import settings


class TestRootEndpoint:
    def test_root_reports_app_name(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == f"Welcome to {settings.APP_NAME} API"
        assert data["status"] == "operational"


class TestStatusEndpoint:
    """Test cases for the /status endpoint."""

    def test_status_endpoint_basic(self, client):
        """/status returns the build fields without needing a login."""
        response = client.get("/status")

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"status", "build", "sha", "env"}
        assert data["status"] == "ok"

    @pytest.mark.parametrize("env,expected", [
        (
            {"BUILD_NUMBER": "123", "GIT_SHA": "abc123def456", "ENVIRONMENT": "production"},
            {"build": "123", "sha": "abc123def456", "env": "production"},
        ),
        (
            {"BUILD_NUMBER": "456", "GITHUB_SHA": "github123sha456", "ENV": "staging"},
            {"build": "456", "sha": "github123sha456", "env": "staging"},
        ),
        (
            {"BUILD_NUMBER": "789", "GIT_SHA": "priority_sha", "GITHUB_SHA": "fallback_sha",
             "ENVIRONMENT": "priority_env", "ENV": "fallback_env"},
            {"build": "789", "sha": "priority_sha", "env": "priority_env"},
        ),
    ])
    def test_status_reads_ci_variables(self, client, env, expected):
        with patch.dict(os.environ, env):
            data = client.get("/status").json()

        for key, value in expected.items():
            assert data[key] == value

    def test_status_local_development(self, client):
        """Without CI variables the build falls back to local defaults."""
        cleared = {k: v for k, v in os.environ.items()
                   if k not in ("BUILD_NUMBER", "GIT_SHA", "GITHUB_SHA", "ENVIRONMENT", "ENV")}
        with patch.dict(os.environ, cleared, clear=True):
            data = client.get("/status").json()

        assert data["build"] == "local-dev"
        assert data["env"] == "development"
        assert data["sha"] == "local-dev" or len(data["sha"]) >= 8


class TestDatabaseHealth:
    def test_health_db_available(self, client):
        response = client.get("/health/db")

        assert response.status_code == 200
        assert response.json()["db"] == "available"
