from __future__ import annotations


class SocialClientError(RuntimeError):
    """Raised when a request to the SocialHub API fails or is refused."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


__all__ = ["SocialClientError"]
