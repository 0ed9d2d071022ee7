import logging
import sys

DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Map string log levels to logging constants
LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

# Modules that produce verbose, technical output
# These will be set to WARNING by default unless verbose mode is enabled
TECHNICAL_MODULES = [
    "dbimporter.connectors.database.catalog",
    "dbimporter.connectors.database.query_builder",
    "dbimporter.connectors.database.backends",
]

# Third-party loggers that are chatty at INFO/DEBUG
NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "aiosqlite",
    "asyncpg",
]


def get_logger(name: str) -> logging.Logger:
    """Return a logger with the specified name.

    Args:
        name: The name for the logger, typically __name__

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def configure_logging(
    verbose: bool = False,
    quiet: bool = False,
) -> None:
    """Configure logging settings based on command line flags.

    Args:
        verbose: Whether to enable verbose mode (shows all debug logs)
        quiet: Whether to enable quiet mode (only shows warnings and errors)
    """
    if quiet:
        package_level = logging.WARNING
    elif verbose:
        package_level = logging.DEBUG
    else:
        package_level = DEFAULT_LOG_LEVEL

    # Configure the package logger only; the host application owns the root logger
    package_logger = logging.getLogger("dbimporter")
    package_logger.setLevel(package_level)

    # Only attach our own handler when nobody upstream is listening,
    # so records are never emitted twice
    if not package_logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        package_logger.addHandler(handler)

    # Set specific levels for technical modules
    for module_name in TECHNICAL_MODULES:
        module_logger = logging.getLogger(module_name)
        if verbose:
            module_logger.setLevel(logging.DEBUG)
        else:
            module_logger.setLevel(max(package_level, logging.WARNING))

    suppress_third_party_loggers()


def suppress_third_party_loggers():
    """Suppress noisy third-party loggers."""
    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

