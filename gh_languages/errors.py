"""Exception types raised by the authentication and language harvesting workflow."""

from __future__ import annotations

from typing import Optional


class GitHubLanguagesError(Exception):
    """Base exception for every failure in a harvesting run."""


class ConfigError(GitHubLanguagesError):
    """Raised when org, IDs or key material are missing or malformed."""


class KeyParseError(GitHubLanguagesError):
    """Raised when the private key is present but cannot be used as an RSA key."""

    TOO_SHORT = "too_short"
    INVALID_PEM = "invalid_pem"
    UNSUPPORTED_KEY = "unsupported_key"

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.reason = reason


class SigningError(GitHubLanguagesError):
    """Raised when the app assertion cannot be signed."""


class TokenExchangeError(GitHubLanguagesError):
    """Raised when GitHub rejects the app assertion or the installation."""

    def __init__(
        self,
        message: str,
        app_id: int,
        installation_id: int,
        status_code: Optional[int] = None,
        platform_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.app_id = app_id
        self.installation_id = installation_id
        self.status_code = status_code
        self.platform_message = platform_message


class EmptyTokenError(TokenExchangeError):
    """Raised when a successful token exchange response carries no token."""


class GitHubAPIError(GitHubLanguagesError):
    """Raised for any non-2xx REST response, keeping GitHub's own status and message."""

    def __init__(self, status_code: int, message: str, url: str):
        super().__init__(f"HTTP {status_code} for {url}: {message}")
        self.status_code = status_code
        self.message = message
        self.url = url


class EnumerationError(GitHubLanguagesError):
    """Raised when a page of the organization repository listing cannot be fetched."""

    def __init__(self, message: str, org: str, page: int, status_code: Optional[int] = None):
        super().__init__(message)
        self.org = org
        self.page = page
        self.status_code = status_code


class HarvestError(GitHubLanguagesError):
    """Raised when the language map of one repository cannot be fetched."""

    def __init__(self, message: str, owner: str, name: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.owner = owner
        self.name = name
        self.status_code = status_code


class RunCancelled(GitHubLanguagesError):
    """Raised when the cancel event is set before the next network call."""


__all__ = [
    "GitHubLanguagesError",
    "ConfigError",
    "KeyParseError",
    "SigningError",
    "TokenExchangeError",
    "EmptyTokenError",
    "GitHubAPIError",
    "EnumerationError",
    "HarvestError",
    "RunCancelled",
]
