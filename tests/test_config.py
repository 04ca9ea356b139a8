# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import os
from collections.abc import Generator
from typing import Any
from unittest import mock

import pytest
from pydantic import ValidationError

from websearch_core.config import Settings


@pytest.fixture
def clean_env() -> Generator[None, Any, None]:
    """
    Ensure a clean environment for each test. Mock os.environ so that tests don't influence each other or the actual
    system environment.
    """

    with mock.patch.dict(os.environ, {}, clear=True):
        yield


def test_defaults(clean_env) -> None:  # noqa: ANN001
    """Test that the settings load with default values correctly."""

    settings = Settings(_env_file=None)  # type: ignore[call-arg]

    assert settings.CIRCUIT_FAILURE_THRESHOLD == 3
    assert settings.CIRCUIT_COOLDOWN == 30
    assert settings.STRATEGY_MAX_FALLBACK_ATTEMPTS == 3
    assert settings.STRATEGY_MIN_SUCCESS_RATE == 0.3
    assert settings.CACHE_TTL == 1800
    assert settings.HTTP_MIN_DOMAIN_DELAY == 0.3
    assert settings.SEARCH_PROVIDERS[0] == "google"
    assert settings.log_level == "INFO"


def test_env_override(clean_env) -> None:  # noqa: ANN001
    """Test that environment variables override defaults, case insensitively."""

    with mock.patch.dict(os.environ, {"circuit_failure_threshold": "7", "CACHE_TTL": "60"}):
        settings = Settings(_env_file=None)  # type: ignore[call-arg]

    assert settings.CIRCUIT_FAILURE_THRESHOLD == 7
    assert settings.CACHE_TTL == 60


def test_providers_from_env(clean_env) -> None:  # noqa: ANN001
    """Test that the provider list is read from JSON in the environment."""

    with mock.patch.dict(os.environ, {"SEARCH_PROVIDERS": '["bing", "wikipedia"]'}):
        settings = Settings(_env_file=None)  # type: ignore[call-arg]

    assert settings.SEARCH_PROVIDERS == ["bing", "wikipedia"]


def test_unknown_provider(clean_env) -> None:  # noqa: ANN001
    """Test that an unsupported provider name is rejected."""

    with pytest.raises(ValidationError):
        Settings(SEARCH_PROVIDERS=["altavista"], _env_file=None)  # type: ignore[call-arg]


def test_duplicate_providers(clean_env) -> None:  # noqa: ANN001
    """Test that a provider cannot be registered twice."""

    with pytest.raises(ValidationError) as excinfo:
        Settings(SEARCH_PROVIDERS=["bing", "bing"], _env_file=None)  # type: ignore[call-arg]

    assert "SEARCH_PROVIDERS must not contain duplicates" in str(excinfo.value)


def test_empty_providers(clean_env) -> None:  # noqa: ANN001
    with pytest.raises(ValidationError) as excinfo:
        Settings(SEARCH_PROVIDERS=[], _env_file=None)  # type: ignore[call-arg]

    assert "SEARCH_PROVIDERS must name at least one provider" in str(excinfo.value)


def test_result_bounds(clean_env) -> None:  # noqa: ANN001
    """Test that the multi-round result floor cannot exceed the cap."""

    with pytest.raises(ValidationError) as excinfo:
        Settings(QUALITY_MIN_RESULTS=20, QUALITY_MAX_RESULTS=10, _env_file=None)  # type: ignore[call-arg]

    assert "QUALITY_MIN_RESULTS must not exceed QUALITY_MAX_RESULTS" in str(excinfo.value)


def test_rate_constraints(clean_env) -> None:  # noqa: ANN001
    """Test validation boundaries for the success rate floor."""

    for rate in (0.0, 1.0):
        configured = Settings(STRATEGY_MIN_SUCCESS_RATE=rate, _env_file=None)  # type: ignore[call-arg]
        assert configured.STRATEGY_MIN_SUCCESS_RATE == rate

    with pytest.raises(ValidationError):
        Settings(STRATEGY_MIN_SUCCESS_RATE=-0.1, _env_file=None)  # type: ignore[call-arg]

    with pytest.raises(ValidationError):
        Settings(STRATEGY_MIN_SUCCESS_RATE=1.1, _env_file=None)  # type: ignore[call-arg]


def test_content_length_floor(clean_env) -> None:  # noqa: ANN001
    with pytest.raises(ValidationError):
        Settings(CONTENT_MAX_LENGTH=50, _env_file=None)  # type: ignore[call-arg]
