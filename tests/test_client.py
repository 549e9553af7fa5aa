"""Optimistic toggles and cursor iteration in the HTTP client."""
from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from socialhub.client import OptimisticToggle, SocialClient, SocialClientError, ToggleState, apply_optimistic

POST_ID = "7f1d3c0e-1111-4c6b-9e55-0a2b3c4d5e6f"


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> SocialClient:
    return SocialClient("http://testserver", token="token-123", transport=httpx.MockTransport(handler))


def test_apply_optimistic_reconciles_with_server_answer():
    seen: list[ToggleState] = []

    settled = apply_optimistic(
        ToggleState(is_active=False, count=4),
        lambda: ToggleState(is_active=True, count=7),
        on_change=seen.append,
    )

    assert seen == [ToggleState(True, 5), ToggleState(True, 7)]
    assert settled == ToggleState(True, 7)


def test_apply_optimistic_reverts_on_client_error():
    seen: list[ToggleState] = []

    def _fail() -> ToggleState:
        raise SocialClientError("offline")

    settled = apply_optimistic(ToggleState(is_active=True, count=1), _fail, on_change=seen.append)

    assert seen == [ToggleState(False, 0), ToggleState(True, 1)]
    assert settled == ToggleState(True, 1)


def test_apply_optimistic_reverts_then_reraises_unexpected_errors():
    seen: list[ToggleState] = []

    def _boom() -> ToggleState:
        raise KeyError("count")

    with pytest.raises(KeyError):
        apply_optimistic(ToggleState(is_active=False, count=0), _boom, on_change=seen.append)

    assert seen[-1] == ToggleState(False, 0)


def test_like_toggle_sends_bearer_token_and_applies_server_state():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"success": True, "is_active": True, "count": 10})

    with _client(handler) as client:
        button = client.like_toggle(POST_ID, is_liked=False, like_count=3)
        assert button.toggle() == ToggleState(True, 10)
        assert button.state == ToggleState(True, 10)

    assert requests[0].method == "POST"
    assert requests[0].url.path == f"/posts/{POST_ID}/like"
    assert requests[0].headers["Authorization"] == "Bearer token-123"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"success": False, "message": "You must be logged in"}),
        httpx.Response(200, json={"success": False, "message": "Failed to toggle like"}),
        httpx.Response(500, text="oops"),
    ],
)
def test_failed_toggle_reverts_to_snapshot(response):
    with _client(lambda request: response) as client:
        button = client.like_toggle(POST_ID, is_liked=True, like_count=2)
        assert button.toggle() == ToggleState(True, 2)
        assert button.pending is False


def test_network_error_reverts_follow_toggle():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    changes: list[ToggleState] = []
    with _client(handler) as client:
        button = client.follow_toggle("bob", is_following=False, follower_count=0, on_change=changes.append)
        assert button.toggle() == ToggleState(False, 0)

    assert changes == [ToggleState(True, 1), ToggleState(False, 0)]


def test_second_toggle_while_pending_is_dropped():
    calls: list[str] = []
    holder: dict[str, OptimisticToggle] = {}

    def mutation() -> ToggleState:
        calls.append("sent")
        # A second click arrives before the first request settles
        assert holder["button"].pending is True
        assert holder["button"].toggle() == ToggleState(True, 1)
        return ToggleState(True, 1)

    holder["button"] = OptimisticToggle(ToggleState(False, 0), mutation)

    assert holder["button"].toggle() == ToggleState(True, 1)
    assert calls == ["sent"]
    assert holder["button"].pending is False


def test_iter_items_follows_cursors_until_exhausted():
    pages = {
        None: {"items": [{"id": "a"}, {"id": "b"}], "next_cursor": "b"},
        "b": {"items": [{"id": "c"}], "next_cursor": None},
    }
    seen_params: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        seen_params.append(params)
        return httpx.Response(200, content=json.dumps(pages[params.get("cursor")]))

    with _client(handler) as client:
        ids = [item["id"] for item in client.iter_feed(limit=2)]

    assert ids == ["a", "b", "c"]
    assert seen_params[0] == {"type": "all", "limit": "2"}
    assert seen_params[1]["cursor"] == "b"


def test_login_stores_token():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/auth/login":
            return httpx.Response(200, json={"access_token": "fresh", "user_id": POST_ID, "username": "me"})
        return httpx.Response(200, json={"items": [], "next_cursor": None, "auth": request.headers["Authorization"]})

    with SocialClient("http://testserver", transport=httpx.MockTransport(handler)) as client:
        client.login("me@example.com", "s3cret-pass")
        assert list(client.iter_notifications()) == []
        assert client._http.headers["Authorization"] == "Bearer fresh"
