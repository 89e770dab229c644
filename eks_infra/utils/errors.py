"""
Error types raised while deriving the resource graph.

All of them subclass ValueError so the entrypoint can surface them with a
single handler. None are retryable: the configuration or the call-site
arguments must be fixed and the build re-run.
"""

from __future__ import annotations


class InfraError(ValueError):
    """Base class for configuration and derivation failures."""

    def __init__(self, message: str, field: str = "") -> None:
        super().__init__(message)
        self.field = field


class ConfigValidationError(InfraError):
    """A required configuration field is missing, empty or mistyped."""


class TagResolutionError(InfraError):
    """The effective name or resource type resolved to an empty value."""


class NodeGroupArgumentError(InfraError):
    """A required node-group argument is missing or inconsistent."""
