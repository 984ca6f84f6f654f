"""
Input validation and sanitization for kgrep.

This module provides validation functions for user input and environment
configuration. Explicit user input that fails validation raises
ConfigurationError; environment values that fail validation fall back to
their defaults with a warning.

Key Functions:
- validate_port: Validates port numbers (1-65535)
- validate_host: Validates host strings
- validate_api_version: Validates "group/version" or "version" strings
- parse_namespaces: Parses a comma-separated namespace list
- validate_max_workers: Validates the worker bound of the resource engine
- validate_timeout: Validates the resource engine timeout
- settings_from_env: Reads GrepSettings from the environment

Example:
    ```python
    try:
        namespaces = parse_namespaces("prod, staging,prod")  # ["prod", "staging"]
        port = validate_port(8080)
    except ConfigurationError as e:
        print(f"Validation failed: {e}")
    ```
"""

import logging
import os
from typing import List, Optional

from .constants import (
    ENV_MAX_WORKERS, ENV_GREP_TIMEOUT, DEFAULT_MAX_WORKERS, DEFAULT_GREP_TIMEOUT_SECONDS
)
from .exceptions import ConfigurationError
from .models import GrepSettings

log = logging.getLogger('kgrep')


def validate_port(port: int) -> int:
    """
    Validate port number for server binding.

    Args:
        port: Port number to validate (must be integer)

    Returns:
        int: The validated port number (unchanged if valid)

    Raises:
        ConfigurationError: If port is not an integer or outside valid range
    """
    if not isinstance(port, int) or port < 1 or port > 65535:
        raise ConfigurationError(f"Port must be an integer between 1 and 65535, got: {port}")
    return port


def validate_host(host: str) -> str:
    """
    Validate host string for server binding.

    Args:
        host: Host string to validate (e.g., "localhost", "0.0.0.0", "example.com")

    Returns:
        str: The validated and trimmed host string

    Raises:
        ConfigurationError: If host is empty or too long
    """
    if not host or not host.strip():
        raise ConfigurationError("Host cannot be empty")

    host = host.strip()

    if len(host) > 253:  # DNS name length limit
        raise ConfigurationError("Host name too long")

    return host


def validate_api_version(api_version: Optional[str]) -> Optional[str]:
    """
    Validate an API version string.

    Accepts "version" or "group/version"; None and blank values mean "discover".

    Raises:
        ConfigurationError: If the value has empty parts or more than one "/"
    """
    if api_version is None or not api_version.strip():
        return None
    api_version = api_version.strip()
    parts = api_version.split("/")
    if len(parts) > 2 or not all(parts):
        raise ConfigurationError(
            f"Invalid API version '{api_version}': expected 'group/version' or 'version'")
    return api_version


def parse_namespaces(value: Optional[str]) -> List[str]:
    """
    Parse a comma-separated namespace list.

    Tokens are trimmed, empty ones skipped, duplicates dropped keeping the
    first occurrence. None returns an empty list (use the default namespace).

    Raises:
        ConfigurationError: If the value is given but holds no namespace
    """
    if value is None:
        return []
    namespaces: List[str] = []
    for token in value.split(","):
        token = token.strip()
        if token and token not in namespaces:
            namespaces.append(token)
    if not namespaces:
        raise ConfigurationError("invalid namespace list: no valid namespaces provided")
    return namespaces


def validate_max_workers(value: Optional[int]) -> Optional[int]:
    """Validate the worker bound; None means one worker per resource."""
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ConfigurationError(f"Max workers must be a positive integer, got: {value}")
    return value


def validate_timeout(value: Optional[float]) -> Optional[float]:
    """Validate the grep timeout in seconds; None means no timeout."""
    if value is None:
        return None
    if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
        raise ConfigurationError(f"Timeout must be a positive number of seconds, got: {value}")
    return float(value)


def settings_from_env() -> GrepSettings:
    """
    Read engine settings from KGREP_MAX_WORKERS and KGREP_GREP_TIMEOUT.

    Invalid values are logged and replaced by the defaults.
    """
    max_workers = DEFAULT_MAX_WORKERS
    raw = os.getenv(ENV_MAX_WORKERS)
    if raw:
        try:
            max_workers = validate_max_workers(int(raw))
        except (ValueError, ConfigurationError):
            log.warning(f"[config] Invalid {ENV_MAX_WORKERS}={raw!r}, using default: {DEFAULT_MAX_WORKERS}")

    timeout = DEFAULT_GREP_TIMEOUT_SECONDS
    raw = os.getenv(ENV_GREP_TIMEOUT)
    if raw:
        try:
            timeout = validate_timeout(float(raw))
        except (ValueError, ConfigurationError):
            log.warning(f"[config] Invalid {ENV_GREP_TIMEOUT}={raw!r}, using default: {DEFAULT_GREP_TIMEOUT_SECONDS}")

    return GrepSettings(max_workers=max_workers, timeout=timeout)
