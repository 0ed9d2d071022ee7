"""Profile loading for dbimporter."""

import logging
import os
from typing import Any, Dict, Optional

import yaml

from dbimporter.config import DatabaseImporterOptions
from dbimporter.exceptions import ConfigurationError
from dbimporter.logging import configure_logging, get_logger

logger = get_logger(__name__)

DATABASE_CONNECTOR_TYPES = ("database",)


class Project:
    """Loads connector definitions from ``profiles/<profile>.yml``.

    A profile looks like::

        log_level: info
        connectors:
          shop:
            type: database
            params:
              connection_string: postgresql://app@db/shop
              isolation_level: Serializable
    """

    def __init__(self, project_dir: str, profile_name: str = "dev"):
        """Initialize a Project instance using a profile.

        Args:
        ----
            project_dir: Path to the project directory
            profile_name: Name of the profile to load (default: 'dev')

        """
        self.project_dir = project_dir
        self.profile_name = profile_name
        self.profile = self._load_profile(profile_name)

        self._configure_logging_from_profile()

        logger.debug(f"Loaded profile: {profile_name}")

    @property
    def profile_path(self) -> str:
        return os.path.join(self.project_dir, "profiles", f"{self.profile_name}.yml")

    def _load_profile(self, profile_name: str) -> Dict[str, Any]:
        profile_path = os.path.join(self.project_dir, "profiles", f"{profile_name}.yml")
        logger.debug(f"Loading profile from: {profile_path}")
        if not os.path.exists(profile_path):
            logger.warning(f"Profile not found at {profile_path}")
            return {}

        with open(profile_path, "r") as f:
            try:
                profile = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Invalid YAML in {profile_path}: {e}", "project"
                ) from e

        if not profile:
            return {}
        if not isinstance(profile, dict):
            raise ConfigurationError(
                f"Profile {profile_path} must contain a mapping", "project"
            )
        self._validate_connectors(profile, profile_path)
        return profile

    def _validate_connectors(self, profile: Dict[str, Any], profile_path: str) -> None:
        connectors = profile.get("connectors", {})
        if not isinstance(connectors, dict):
            raise ConfigurationError(
                f"'connectors' section in {profile_path} must be a dictionary",
                "project",
            )
        for name, config in connectors.items():
            if not isinstance(config, dict):
                raise ConfigurationError(
                    f"Connector '{name}' in {profile_path} must be a dictionary",
                    "project",
                )

    def _configure_logging_from_profile(self) -> None:
        log_level_str = str(self.profile.get("log_level", "info")).lower()
        verbose = log_level_str == "debug"
        quiet = log_level_str in ["warning", "error", "critical"]
        configure_logging(verbose=verbose, quiet=quiet)

        for module_name, level_str in self.profile.get("module_log_levels", {}).items():
            level = getattr(logging, str(level_str).upper(), logging.INFO)
            logging.getLogger(module_name).setLevel(level)

    def get_profile(self) -> Dict[str, Any]:
        return self.profile

    def get_connectors(self) -> Dict[str, Dict[str, Any]]:
        """Return every connector definition in the profile, keyed by name."""
        return dict(self.profile.get("connectors", {}))

    def get_database_connectors(self) -> Dict[str, Dict[str, Any]]:
        return {
            name: config
            for name, config in self.get_connectors().items()
            if str(config.get("type", "")).lower() in DATABASE_CONNECTOR_TYPES
        }

    def get_connector(self, name: str) -> Optional[Dict[str, Any]]:
        return self.get_connectors().get(name)

    def get_importer_options(self, name: str) -> DatabaseImporterOptions:
        """Build importer options for the database connector ``name``.

        Raises:
        ------
            ConfigurationError: If the connector is missing, not a database
                connector or has invalid parameters

        """
        config = self.get_connector(name)
        if config is None:
            raise ConfigurationError(
                f"Connector '{name}' not found in profile '{self.profile_name}'", name
            )

        connector_type = str(config.get("type", "")).lower()
        if connector_type not in DATABASE_CONNECTOR_TYPES:
            raise ConfigurationError(
                f"Connector '{name}' has type '{config.get('type')}', expected 'database'",
                name,
            )

        params = config.get("params", {}) or {}
        return DatabaseImporterOptions.from_dict(params)
