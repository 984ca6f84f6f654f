"""
Custom exceptions for kgrep.

This module defines the exception classes raised by kgrep. Every failure of a
grep call surfaces as exactly one of them; client errors are chained as the
cause.

Exception Hierarchy:
- KgrepError: Base exception for all kgrep-specific errors
  - ResolutionError: Discovery lookup or dynamic listing failed
  - FetchError: Typed listing, pod listing or log fetch failed
  - SerializationError: A resource could not be rendered as text
  - UnsupportedSortError: An unrecognized sort order was requested
  - GrepTimeoutError: The resource grep did not finish in time
  - KubernetesConnectionError: Kubernetes configuration could not be loaded
  - ConfigurationError: Invalid user input or environment value

Example:
    ```python
    try:
        matches = kgrep.grep_logs("prod", None, "ERROR", "by-date")
    except UnsupportedSortError as e:
        print(f"Cannot sort: {e}")
    ```
"""


class KgrepError(Exception):
    """Base exception for kgrep errors."""
    pass


class ResolutionError(KgrepError):
    """Raised when the discovery lookup or the dynamic listing fails."""
    pass


class FetchError(KgrepError):
    """Raised when a typed listing, pod listing or log fetch fails."""
    pass


class SerializationError(KgrepError):
    """Raised when a resource cannot be rendered as YAML."""

    def __init__(self, resource_name: str, reason: str):
        super().__init__(f"Error while getting {resource_name} as YAML: {reason}")
        self.resource_name = resource_name


class UnsupportedSortError(KgrepError):
    """Raised when a sort order other than the supported ones is requested."""
    pass


class GrepTimeoutError(KgrepError):
    """Raised when the concurrent resource grep exceeds its timeout."""
    pass


class KubernetesConnectionError(KgrepError):
    """Raised when unable to load the Kubernetes configuration."""
    pass


class ConfigurationError(KgrepError):
    """Raised when there's a configuration issue."""
    pass
