"""Error taxonomy shared by connectors, the orchestrator and the dispatch shell.

- ValidationError: caller input does not match the operation's shape (never retried)
- RemoteCallError: a vendor API call failed (caller may re-invoke the tool)
- AuthRequiredError: calendar credentials are missing or cannot be refreshed
- ConfigurationError: required configuration is absent or malformed (fatal at startup)
"""
from typing import Optional


class ContentFlowError(Exception):
    """Base class for all domain errors."""


class ValidationError(ContentFlowError):
    """Raised when tool arguments fail validation."""

    def __init__(self, message: str, errors: Optional[list[dict]] = None):
        super().__init__(message)
        self.errors = errors or []


class RemoteCallError(ContentFlowError):
    """Raised when a vendor call fails. Wraps the underlying error with context."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BranchAlreadyExistsError(RemoteCallError):
    """Raised when the source host rejects a branch because the ref already exists."""

    def __init__(self, branch_name: str, status_code: Optional[int] = 422):
        super().__init__(f"Branch '{branch_name}' already exists", status_code)
        self.branch_name = branch_name


class AuthRequiredError(ContentFlowError):
    """Raised when calendar credentials are missing or cannot be refreshed."""

    def __init__(self, message: str, recovery_hint: str):
        super().__init__(f"{message} {recovery_hint}")
        self.recovery_hint = recovery_hint


class ConfigurationError(ContentFlowError):
    """Raised when required configuration is missing or malformed."""
