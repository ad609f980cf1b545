from __future__ import annotations


class StackFastError(Exception):
    """Base class for errors raised by StackFast collaborators."""


class AnalysisError(StackFastError):
    """The project-analysis collaborator failed or returned unusable output."""


class CatalogError(StackFastError):
    """The catalog store failed or returned records that are not tool profiles."""


class ConfigurationError(StackFastError):
    """A collaborator could not be built from the current configuration."""
