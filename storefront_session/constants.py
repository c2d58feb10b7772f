"""
Configuration constants for the storefront session layer

This module contains the configurable defaults used throughout the package.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


# Backend location
STOREFRONT_API_BASE_URL = _get_env_str(
    "STOREFRONT_API_BASE_URL", "http://localhost:8000/api/v1"
)

# Timeouts. Renewal gates every queued request so it must stay shorter.
STOREFRONT_REQUEST_TIMEOUT_SECONDS = _get_env_float(
    "STOREFRONT_REQUEST_TIMEOUT_SECONDS", 10.0
)
STOREFRONT_REFRESH_TIMEOUT_SECONDS = _get_env_float(
    "STOREFRONT_REFRESH_TIMEOUT_SECONDS", 5.0
)

# Credential persistence (empty -> in-memory only)
STOREFRONT_CREDENTIALS_FILE = _get_env_str("STOREFRONT_CREDENTIALS_FILE", "")
STOREFRONT_STORAGE_WRITE_ATTEMPTS = _get_env_int(
    "STOREFRONT_STORAGE_WRITE_ATTEMPTS", 3
)

# Navigation target used when the session can no longer be recovered
STOREFRONT_LOGIN_ROUTE = _get_env_str("STOREFRONT_LOGIN_ROUTE", "/login")

# Backend endpoints
LOGIN_PATH = "/login"
REGISTER_PATH = "/register"
REFRESH_PATH = "/refresh"
PROFILE_PATH = "/profile"

# Persisted key layout
ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
LEGACY_ACCESS_TOKEN_KEY = "jwt_token"

# Envelope codes meaning success (the backend answers 200, older builds 0)
ENVELOPE_SUCCESS_CODES = frozenset({0, 200})

# Generic message when neither server nor transport gives one
GENERIC_FAILURE_MESSAGE = "Service is busy, please try again later"
