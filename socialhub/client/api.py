"""Synchronous HTTP client for the SocialHub API."""
from __future__ import annotations

import logging
from typing import Any, Iterator, Mapping
from uuid import UUID

import httpx

from .errors import SocialClientError
from .optimistic import OptimisticToggle, ToggleState

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class SocialClient:
    """Thin wrapper over :class:`httpx.Client` speaking the SocialHub JSON API."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._http = httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)
        if token:
            self.set_token(token)

    def __enter__(self) -> "SocialClient":
        return self

    def __exit__(self, *_exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def set_token(self, token: str) -> None:
        self._http.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise SocialClientError("Network error") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {"items": payload}

        if response.is_error:
            message = payload.get("message") or payload.get("detail") or response.reason_phrase
            raise SocialClientError(str(message), status_code=response.status_code)
        if payload.get("success") is False:
            raise SocialClientError(payload.get("message") or "Request failed", status_code=response.status_code)
        return payload

    def login(self, email: str, password: str) -> dict[str, Any]:
        payload = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.set_token(payload["access_token"])
        return payload

    @staticmethod
    def _toggle_state(payload: Mapping[str, Any]) -> ToggleState:
        return ToggleState(is_active=bool(payload.get("is_active")), count=int(payload.get("count") or 0))

    def toggle_like(self, post_id: UUID | str) -> ToggleState:
        return self._toggle_state(self._request("POST", f"/posts/{post_id}/like"))

    def toggle_follow(self, username: str) -> ToggleState:
        return self._toggle_state(self._request("POST", f"/users/{username}/follow"))

    def like_toggle(self, post_id: UUID | str, *, is_liked: bool, like_count: int, on_change=None) -> OptimisticToggle:
        return OptimisticToggle(
            ToggleState(is_active=is_liked, count=like_count),
            lambda: self.toggle_like(post_id),
            on_change=on_change,
        )

    def follow_toggle(
        self,
        username: str,
        *,
        is_following: bool,
        follower_count: int,
        on_change=None,
    ) -> OptimisticToggle:
        return OptimisticToggle(
            ToggleState(is_active=is_following, count=follower_count),
            lambda: self.toggle_follow(username),
            on_change=on_change,
        )

    def iter_pages(self, path: str, params: Mapping[str, Any] | None = None) -> Iterator[list[dict[str, Any]]]:
        """Yield successive pages of a cursor-paginated list until ``next_cursor`` is null."""

        query = {key: value for key, value in (params or {}).items() if value is not None}
        while True:
            payload = self._request("GET", path, params=query)
            yield list(payload.get("items") or [])
            cursor = payload.get("next_cursor")
            if not cursor:
                return
            query["cursor"] = cursor

    def iter_items(self, path: str, params: Mapping[str, Any] | None = None) -> Iterator[dict[str, Any]]:
        for page in self.iter_pages(path, params):
            yield from page

    def iter_feed(self, feed_type: str = "all", *, limit: int | None = None) -> Iterator[dict[str, Any]]:
        return self.iter_items("/posts", {"type": feed_type, "limit": limit})

    def iter_user_posts(self, username: str, *, limit: int | None = None) -> Iterator[dict[str, Any]]:
        return self.iter_items(f"/users/{username}/posts", {"limit": limit})

    def iter_comments(self, post_id: UUID | str, *, limit: int | None = None) -> Iterator[dict[str, Any]]:
        return self.iter_items(f"/posts/{post_id}/comments", {"limit": limit})

    def iter_followers(self, username: str, *, limit: int | None = None) -> Iterator[dict[str, Any]]:
        return self.iter_items(f"/users/{username}/followers", {"limit": limit})

    def iter_following(self, username: str, *, limit: int | None = None) -> Iterator[dict[str, Any]]:
        return self.iter_items(f"/users/{username}/following", {"limit": limit})

    def iter_notifications(self, *, limit: int | None = None) -> Iterator[dict[str, Any]]:
        return self.iter_items("/notifications", {"limit": limit})


__all__ = ["SocialClient", "DEFAULT_TIMEOUT"]
