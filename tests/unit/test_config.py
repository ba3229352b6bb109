"""Unit tests for SessionConfig."""

import pytest

from sqlsession.config import SessionConfig
from sqlsession.exceptions import ImproperConfigurationError


def test_defaults() -> None:
    config = SessionConfig()

    assert config.return_generated_keys is True
    assert config.generated_key_columns == ()
    assert config.strict is False
    assert config.query_timeout is None


def test_key_columns_are_stored_as_tuple() -> None:
    assert SessionConfig(generated_key_columns=["id", "created_at"]).generated_key_columns == ("id", "created_at")


def test_replace_creates_new_instance() -> None:
    config = SessionConfig()

    changed = config.replace(strict=True, query_timeout=1.5)

    assert changed is not config
    assert changed.strict is True
    assert changed.query_timeout == 1.5
    assert config.strict is False


def test_replace_rejects_unknown_field() -> None:
    with pytest.raises(TypeError, match="'fetch_size' is not a field"):
        SessionConfig().replace(fetch_size=10)


def test_config_is_immutable() -> None:
    with pytest.raises(AttributeError, match="immutable"):
        SessionConfig().strict = True  # type: ignore[misc]


def test_negative_timeout_rejected() -> None:
    with pytest.raises(ImproperConfigurationError, match="query_timeout"):
        SessionConfig(query_timeout=-1)


def test_non_string_key_column_rejected() -> None:
    with pytest.raises(ImproperConfigurationError, match="generated_key_columns"):
        SessionConfig(generated_key_columns=[1])  # type: ignore[list-item]


def test_equality_and_hash() -> None:
    assert SessionConfig(strict=True) == SessionConfig(strict=True)
    assert hash(SessionConfig(strict=True)) == hash(SessionConfig(strict=True))
    assert SessionConfig(strict=True) != SessionConfig()


def test_repr_lists_fields() -> None:
    assert repr(SessionConfig()) == (
        "SessionConfig(generated_key_columns=(), query_timeout=None, return_generated_keys=True, strict=False)"
    )
