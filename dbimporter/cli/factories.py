"""Factory functions for CLI dependencies."""

import os
from typing import Optional

from dbimporter.cli.errors import ProfileNotFoundError, ProjectNotFoundError
from dbimporter.connectors import importer_registry
from dbimporter.connectors.database import DatabaseImporter
from dbimporter.logging import get_logger
from dbimporter.project import Project

logger = get_logger(__name__)


def load_project_for_command(profile_name: Optional[str] = None) -> Project:
    """Load the project in the current directory.

    Raises:
        ProjectNotFoundError: If there is no profiles directory
        ProfileNotFoundError: If the profile file does not exist
    """
    current_dir = os.getcwd()
    profile = profile_name or "dev"

    profiles_dir = os.path.join(current_dir, "profiles")
    if not os.path.isdir(profiles_dir):
        raise ProjectNotFoundError(current_dir)

    if not os.path.exists(os.path.join(profiles_dir, f"{profile}.yml")):
        available = sorted(
            f[: -len(".yml")] for f in os.listdir(profiles_dir) if f.endswith(".yml")
        )
        raise ProfileNotFoundError(profile, available)

    project = Project(current_dir, profile_name=profile)
    logger.debug(f"Loaded project with profile '{profile}' from {current_dir}")
    return project


def create_importer_for_command(name: str, profile_name: Optional[str] = None) -> DatabaseImporter:
    """Create a database importer for connector ``name`` of the profile."""
    project = load_project_for_command(profile_name)
    options = project.get_importer_options(name)
    importer_class = importer_registry.get(project.get_connector(name)["type"])
    return importer_class(name, options)
