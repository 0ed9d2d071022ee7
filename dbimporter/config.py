"""Configuration for the database importer."""

import dataclasses
import re
from enum import Enum
from typing import Any, Dict, Optional

from dbimporter.exceptions import ConfigurationError
from dbimporter.logging import get_logger

logger = get_logger(__name__)


class IsolationLevel(Enum):
    """Transaction isolation levels understood by the importer."""

    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"
    SNAPSHOT = "SNAPSHOT"
    UNSPECIFIED = "UNSPECIFIED"


class TransactionMode(Enum):
    """How the connection manager handles transactions.

    NONE runs every statement in autocommit mode. SINGLE begins one
    transaction when the connection opens and does not restart it after a
    commit or rollback. ROLLING begins a fresh transaction immediately after
    every commit or rollback.
    """

    NONE = "none"
    SINGLE = "single"
    ROLLING = "rolling"


_ISOLATION_LEVEL_NAMES = {
    "readuncommitted": IsolationLevel.READ_UNCOMMITTED,
    "readcommitted": IsolationLevel.READ_COMMITTED,
    "repeatableread": IsolationLevel.REPEATABLE_READ,
    "serializable": IsolationLevel.SERIALIZABLE,
    "snapshot": IsolationLevel.SNAPSHOT,
    "unspecified": IsolationLevel.UNSPECIFIED,
}


def map_isolation_level(
    name: Optional[str], strict: bool = False
) -> IsolationLevel:
    """Map an isolation level name to an IsolationLevel.

    Matching is case-insensitive and ignores spaces, underscores and hyphens,
    so "ReadCommitted", "read_committed" and "READ COMMITTED" are equivalent.

    Args:
        name: Isolation level name
        strict: Raise instead of falling back for unknown names

    Returns:
        The mapped level; READ_COMMITTED for unknown names when not strict

    Raises:
        ConfigurationError: If strict and the name is not recognized
    """
    if isinstance(name, IsolationLevel):
        return name

    key = re.sub(r"[\s_\-]", "", name or "").lower()
    level = _ISOLATION_LEVEL_NAMES.get(key)
    if level is not None:
        return level

    if strict:
        raise ConfigurationError(
            f"Unknown isolation level '{name}'. Expected one of: "
            f"{', '.join(sorted(_ISOLATION_LEVEL_NAMES))}"
        )

    logger.warning(
        f"Unknown isolation level '{name}', falling back to READ COMMITTED"
    )
    return IsolationLevel.READ_COMMITTED


# PascalCase option names -> snake_case field names
_PASCAL_CASE_ALIASES = {
    "ConnectionString": "connection_string",
    "ProviderName": "provider_name",
    "CommandTimeoutSeconds": "command_timeout_seconds",
    "UseTransactions": "use_transactions",
    "TransactionMode": "transaction_mode",
    "IsolationLevel": "isolation_level",
    "StrictIsolationLevel": "strict_isolation_level",
    "UseConnectionPooling": "use_connection_pooling",
    "MinPoolSize": "min_pool_size",
    "MaxPoolSize": "max_pool_size",
    "UseEncryption": "use_encryption",
    "TrustServerCertificate": "trust_server_certificate",
    "UseIntegratedSecurity": "use_integrated_security",
    "Username": "username",
    "Password": "password",
    "BatchSize": "batch_size",
    "UseRetryLogic": "use_retry_logic",
    "MaxRetryAttempts": "max_retry_attempts",
    "RetryDelayMs": "retry_delay_ms",
    "Host": "host",
    "Port": "port",
    "Database": "database",
    "Schema": "schema",
}

# Industry-standard aliases (Airbyte/Fivetran style) -> field names
_PARAMETER_ALIASES = {
    "dbname": "database",
    "user": "username",
    "url": "connection_string",
    "provider": "provider_name",
    "command_timeout": "command_timeout_seconds",
}

_INT_FIELDS = (
    "command_timeout_seconds",
    "min_pool_size",
    "max_pool_size",
    "batch_size",
    "max_retry_attempts",
    "retry_delay_ms",
    "port",
)

_BOOL_FIELDS = (
    "use_transactions",
    "strict_isolation_level",
    "use_connection_pooling",
    "use_encryption",
    "trust_server_certificate",
    "use_integrated_security",
    "use_retry_logic",
)


def translate_parameters(config: Dict[str, Any]) -> Dict[str, Any]:
    """Translate PascalCase and industry-standard parameter names to field names.

    Canonical names win when both a canonical name and an alias are present.

    Args:
        config: Original configuration parameters

    Returns:
        Translated configuration keyed by DatabaseImporterOptions field names
    """
    translated: Dict[str, Any] = {}
    aliased: Dict[str, Any] = {}

    for key, value in config.items():
        if key in _PASCAL_CASE_ALIASES:
            aliased[_PASCAL_CASE_ALIASES[key]] = value
        elif key in _PARAMETER_ALIASES:
            aliased[_PARAMETER_ALIASES[key]] = value
            logger.debug(
                f"Translated parameter '{key}' -> '{_PARAMETER_ALIASES[key]}'"
            )
        else:
            translated[key] = value

    for key, value in aliased.items():
        translated.setdefault(key, value)

    return translated


def _coerce_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes", "1", "on"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "no", "0", "off"):
        return False
    if isinstance(value, int):
        return bool(value)
    raise ConfigurationError(f"Parameter '{name}' must be a boolean")


@dataclasses.dataclass
class DatabaseImporterOptions:
    """Options for the database importer.

    When ``connection_string`` is empty, a URL is assembled from host, port,
    database and credentials for the selected provider.
    """

    connection_string: str = ""
    provider_name: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    database: Optional[str] = None
    schema: Optional[str] = None
    command_timeout_seconds: int = 30
    use_transactions: bool = True
    transaction_mode: Optional[str] = None
    isolation_level: str = "ReadCommitted"
    strict_isolation_level: bool = False
    use_connection_pooling: bool = True
    min_pool_size: int = 1
    max_pool_size: int = 100
    use_encryption: bool = False
    trust_server_certificate: bool = False
    use_integrated_security: bool = False
    username: Optional[str] = None
    password: Optional[str] = None
    batch_size: int = 1000

    # Declared intent only; retries are orchestrated by the caller
    use_retry_logic: bool = True
    max_retry_attempts: int = 3
    retry_delay_ms: int = 1000

    def __post_init__(self):
        if self.command_timeout_seconds is not None and self.command_timeout_seconds < 0:
            raise ConfigurationError("command_timeout_seconds must not be negative")
        if self.min_pool_size < 0 or self.max_pool_size < 1:
            raise ConfigurationError("Pool sizes must be positive")
        if self.min_pool_size > self.max_pool_size:
            raise ConfigurationError(
                f"min_pool_size ({self.min_pool_size}) exceeds "
                f"max_pool_size ({self.max_pool_size})"
            )
        if self.batch_size < 1:
            raise ConfigurationError("batch_size must be at least 1")

    @classmethod
    def from_dict(cls, params: Dict[str, Any]) -> "DatabaseImporterOptions":
        """Build options from a parameter dictionary.

        Accepts snake_case field names, PascalCase option names and
        industry-standard aliases. Unknown keys are logged and ignored.

        Raises:
            ConfigurationError: If a numeric or boolean option is invalid
        """
        translated = translate_parameters(params or {})
        field_names = {f.name for f in dataclasses.fields(cls)}

        kwargs: Dict[str, Any] = {}
        for key, value in translated.items():
            if key not in field_names:
                logger.debug(f"Ignoring unknown importer option '{key}'")
                continue
            if value is None:
                continue
            if key in _INT_FIELDS:
                try:
                    value = int(value)
                except (ValueError, TypeError):
                    raise ConfigurationError(f"Parameter '{key}' must be an integer")
            elif key in _BOOL_FIELDS:
                value = _coerce_bool(key, value)
            kwargs[key] = value

        return cls(**kwargs)

    @property
    def resolved_isolation_level(self) -> IsolationLevel:
        return map_isolation_level(
            self.isolation_level, strict=self.strict_isolation_level
        )

    @property
    def resolved_transaction_mode(self) -> TransactionMode:
        """The effective transaction mode.

        An explicit ``transaction_mode`` wins; otherwise ``use_transactions``
        selects ROLLING or NONE.
        """
        if self.transaction_mode:
            try:
                mode = TransactionMode(str(self.transaction_mode).strip().lower())
            except ValueError:
                raise ConfigurationError(
                    f"Unknown transaction mode '{self.transaction_mode}'. "
                    "Expected one of: none, single, rolling"
                )
            if not self.use_transactions and mode is not TransactionMode.NONE:
                raise ConfigurationError(
                    f"transaction_mode '{mode.value}' contradicts use_transactions=False"
                )
            return mode
        return TransactionMode.ROLLING if self.use_transactions else TransactionMode.NONE
