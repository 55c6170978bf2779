# src/keh_studio/errors.py

"""Error hierarchy surfaced to the presentation layer."""

from __future__ import annotations

from typing import Any


class KehError(Exception):
    """Base error - everything the core raises on purpose extends this."""

    error_code: str = "KEH_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


# Backup / restore
class MalformedDocument(KehError):
    """Restore input is not a JSON object or lacks a numeric version tag."""

    error_code = "MALFORMED_DOCUMENT"


class FutureVersion(KehError):
    """Restore input was written by a newer build than this one."""

    error_code = "FUTURE_VERSION"

    def __init__(self, document_version: int, current_version: int) -> None:
        super().__init__(
            f"Backup file version ({document_version}) is newer than the application "
            f"version ({current_version}). Please update the application.",
            details={"document_version": document_version, "current_version": current_version},
        )
        self.document_version = document_version
        self.current_version = current_version


class MigrationFailure(KehError):
    """A migration step raised; nothing was applied."""

    error_code = "MIGRATION_FAILURE"


# Elevation
class ChallengeRejected(KehError):
    """Submitted PIN did not match. Recoverable: the user may retry."""

    error_code = "CHALLENGE_REJECTED"

    def __init__(self, message: str = "Incorrect PIN") -> None:
        super().__init__(message)


class PermissionDenied(KehError):
    error_code = "PERMISSION_DENIED"


# External AI collaborator
class QuotaExceeded(KehError):
    """
    Usage quota of the external AI service is exhausted.

    Routed to a blocking modal instead of the regular error banner.
    """

    error_code = "QUOTA_EXCEEDED"

    def __init__(
        self,
        message: str,
        *,
        retry_after_seconds: float = 0.0,
        details_text: str = "",
        is_hard_limit: bool = False,
        action_hint: str = "",
    ) -> None:
        super().__init__(
            message,
            details={
                "retry_after_seconds": retry_after_seconds,
                "details": details_text,
                "is_hard_limit": is_hard_limit,
                "action_hint": action_hint,
            },
        )
        self.retry_after_seconds = retry_after_seconds
        self.details_text = details_text
        self.is_hard_limit = is_hard_limit
        self.action_hint = action_hint
