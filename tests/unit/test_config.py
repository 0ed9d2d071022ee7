"""Tests for importer options and isolation level mapping."""

import logging

import pytest

from dbimporter.config import (
    DatabaseImporterOptions,
    IsolationLevel,
    TransactionMode,
    map_isolation_level,
    translate_parameters,
)
from dbimporter.exceptions import ConfigurationError


@pytest.mark.parametrize(
    "name,expected",
    [
        ("ReadCommitted", IsolationLevel.READ_COMMITTED),
        ("read_committed", IsolationLevel.READ_COMMITTED),
        ("READ COMMITTED", IsolationLevel.READ_COMMITTED),
        ("read-uncommitted", IsolationLevel.READ_UNCOMMITTED),
        ("RepeatableRead", IsolationLevel.REPEATABLE_READ),
        ("serializable", IsolationLevel.SERIALIZABLE),
        ("Snapshot", IsolationLevel.SNAPSHOT),
        ("Unspecified", IsolationLevel.UNSPECIFIED),
    ],
)
def test_map_isolation_level_normalizes_names(name, expected):
    assert map_isolation_level(name) is expected


def test_map_isolation_level_unknown_falls_back_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="dbimporter.config"):
        level = map_isolation_level("Chaos")

    assert level is IsolationLevel.READ_COMMITTED
    assert "Unknown isolation level 'Chaos'" in caplog.text


def test_map_isolation_level_strict_raises():
    with pytest.raises(ConfigurationError, match="Unknown isolation level"):
        map_isolation_level("Chaos", strict=True)


def test_map_isolation_level_passes_enum_through():
    assert map_isolation_level(IsolationLevel.SNAPSHOT) is IsolationLevel.SNAPSHOT


def test_defaults():
    options = DatabaseImporterOptions()
    assert options.command_timeout_seconds == 30
    assert options.use_transactions is True
    assert options.isolation_level == "ReadCommitted"
    assert options.min_pool_size == 1
    assert options.max_pool_size == 100
    assert options.batch_size == 1000
    assert options.max_retry_attempts == 3
    assert options.retry_delay_ms == 1000
    assert options.resolved_isolation_level is IsolationLevel.READ_COMMITTED
    assert options.resolved_transaction_mode is TransactionMode.ROLLING


def test_translate_parameters_aliases():
    translated = translate_parameters(
        {"dbname": "shop", "user": "loader", "ConnectionString": "sqlite://", "port": 1}
    )
    assert translated == {
        "database": "shop",
        "username": "loader",
        "connection_string": "sqlite://",
        "port": 1,
    }


def test_translate_parameters_canonical_name_wins():
    translated = translate_parameters({"database": "canonical", "dbname": "alias"})
    assert translated["database"] == "canonical"


def test_from_dict_coerces_types_and_ignores_unknown_keys():
    options = DatabaseImporterOptions.from_dict(
        {
            "CommandTimeoutSeconds": "45",
            "UseTransactions": "false",
            "max_pool_size": "10",
            "use_encryption": "yes",
            "favourite_color": "blue",
            "password": None,
        }
    )
    assert options.command_timeout_seconds == 45
    assert options.use_transactions is False
    assert options.max_pool_size == 10
    assert options.use_encryption is True
    assert options.password is None
    assert options.resolved_transaction_mode is TransactionMode.NONE


def test_from_dict_rejects_bad_integer():
    with pytest.raises(ConfigurationError, match="must be an integer"):
        DatabaseImporterOptions.from_dict({"batch_size": "lots"})


def test_from_dict_rejects_bad_boolean():
    with pytest.raises(ConfigurationError, match="must be a boolean"):
        DatabaseImporterOptions.from_dict({"use_transactions": "perhaps"})


@pytest.mark.parametrize(
    "kwargs",
    [
        {"command_timeout_seconds": -1},
        {"min_pool_size": 5, "max_pool_size": 2},
        {"max_pool_size": 0},
        {"batch_size": 0},
    ],
)
def test_invalid_values_raise(kwargs):
    with pytest.raises(ConfigurationError):
        DatabaseImporterOptions(**kwargs)


def test_explicit_transaction_mode_wins():
    options = DatabaseImporterOptions(transaction_mode="Single")
    assert options.resolved_transaction_mode is TransactionMode.SINGLE


def test_transaction_mode_contradicting_use_transactions_raises():
    options = DatabaseImporterOptions(use_transactions=False, transaction_mode="rolling")
    with pytest.raises(ConfigurationError, match="contradicts"):
        options.resolved_transaction_mode


def test_transaction_mode_none_with_use_transactions_false_is_consistent():
    options = DatabaseImporterOptions(use_transactions=False, transaction_mode="none")
    assert options.resolved_transaction_mode is TransactionMode.NONE


def test_unknown_transaction_mode_raises():
    with pytest.raises(ConfigurationError, match="Unknown transaction mode"):
        DatabaseImporterOptions(transaction_mode="sometimes").resolved_transaction_mode


def test_strict_isolation_level_raises_on_resolution():
    options = DatabaseImporterOptions(isolation_level="Chaos", strict_isolation_level=True)
    with pytest.raises(ConfigurationError):
        options.resolved_isolation_level
