from __future__ import annotations

from typing import Any


class MailwireClientError(Exception):
    """Base client error."""


class ApiError(MailwireClientError):
    def __init__(self, status: int, status_text: str, body: dict[str, Any]):
        self.status = status
        self.status_text = status_text
        self.body = body
        super().__init__(f"{status} {status_text}: {self.message}")

    @property
    def message(self) -> Any:
        return self.body.get("message")


class AuthError(ApiError):
    """Auth-related API error."""
