"""CLI-specific exceptions with Rich display support."""

from typing import List, Optional


class DbImporterCLIError(Exception):
    """Base exception for CLI operations with Rich display support."""

    def __init__(self, message: str, suggestions: Optional[List[str]] = None):
        self.message = message
        self.suggestions = suggestions or []
        super().__init__(message)


class ProjectNotFoundError(DbImporterCLIError):
    """Raised when no profiles directory exists in the working directory."""

    def __init__(self, directory: str):
        self.directory = directory
        message = f"No dbimporter project found in directory: {directory}"
        suggestions = [
            "Create a 'profiles' directory with a <profile>.yml file",
            "Make sure you're in the correct directory",
        ]
        super().__init__(message, suggestions)


class ProfileNotFoundError(DbImporterCLIError):
    """Raised when a profile cannot be found."""

    def __init__(self, profile_name: str, available_profiles: Optional[List[str]] = None):
        self.profile_name = profile_name
        self.available_profiles = available_profiles or []

        message = f"Profile '{profile_name}' not found"
        suggestions = []
        if self.available_profiles:
            suggestions.append(f"Try: {', '.join(self.available_profiles[:3])}")
        super().__init__(message, suggestions)


class InvalidParameterError(DbImporterCLIError):
    """Raised when a --param option is not of the form key=value."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(
            f"Invalid parameter '{raw}'",
            ["Use --param name=value, e.g. --param min_total=100"],
        )
