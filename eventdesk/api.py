"""
Transport layer (REST backend client).

One ApiClient wraps a requests.Session. Every call:
- attaches ``Authorization: Bearer <token>`` when a token is stored
- sends and receives JSON
- turns any failure (non-2xx, connection error, timeout) into ApiError

Responses are mapped to domain objects here, once, so nothing above this
module ever touches a wire record. No retries, no caching.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

import requests

from eventdesk.errors import ApiError, ValidationError
from eventdesk.mappers import (
    event_from_wire,
    event_to_wire,
    institution_from_wire,
    registration_from_wire,
    user_from_wire,
    user_to_wire,
)
from eventdesk.model import Event, EventDraft, Institution, Registration, Role, User

logger = logging.getLogger(__name__)

TokenGetter = Callable[[], Optional[str]]


def _error_message(resp: requests.Response) -> str:
    """
    Backend errors look like {"error": "..."}; anything else gets "HTTP <status>".
    """
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        msg = body.get("error")
        if isinstance(msg, str) and msg.strip():
            return msg
    return f"HTTP {resp.status_code}"


@contextmanager
def _decoding(what: str) -> Iterator[None]:
    """
    Turn a wire record that does not fit the domain shape into ApiError.
    """
    try:
        yield
    except (KeyError, TypeError, ValueError, ValidationError) as exc:
        raise ApiError(f"Malformed {what} in backend response: {exc}") from exc


class ApiClient:
    def __init__(
        self,
        base_url: str,
        token_getter: TokenGetter,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token_getter = token_getter
        self._http = http if http is not None else requests.Session()

    # -----------------------------------------------------------------------
    # Core request
    # -----------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        headers = {"Accept": "application/json"}
        token = self._token_getter()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = f"{self.base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            resp = self._http.request(
                method,
                url,
                json=json,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.debug("%s %s failed: %s", method, url, exc)
            raise ApiError(f"Network error: {exc}") from exc

        if not resp.ok:
            message = _error_message(resp)
            logger.debug("%s %s -> %s %s", method, url, resp.status_code, message)
            raise ApiError(message, status=resp.status_code)

        if not resp.content:
            return {}
        try:
            body = resp.json()
        except ValueError:
            # DELETE / register endpoints may answer with a plain "ok"
            return {}
        return body if isinstance(body, dict) else {}

    # -----------------------------------------------------------------------
    # Auth
    # -----------------------------------------------------------------------

    def _auth(self, path: str, email: str, password: str, institution: str) -> tuple[str, User]:
        body = self.request(
            "POST",
            path,
            json={"email": email, "password": password, "institutionName": institution},
        )
        token = body.get("token")
        if not isinstance(token, str) or not token:
            raise ApiError("Backend did not return a token")
        with _decoding("user"):
            return token, user_from_wire(body["user"], institution=institution)

    def signup(self, email: str, password: str, institution: str) -> tuple[str, User]:
        return self._auth("/auth/signup", email, password, institution)

    def login(self, email: str, password: str, institution: str) -> tuple[str, User]:
        return self._auth("/auth/login", email, password, institution)

    def get_profile(self) -> User:
        body = self.request("GET", "/auth/profile")
        with _decoding("user"):
            return user_from_wire(body["user"])

    def update_profile(
        self,
        username: Optional[str] = None,
        current_password: Optional[str] = None,
        new_password: Optional[str] = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if username is not None:
            payload["username"] = username
        if new_password is not None:
            payload["currentPassword"] = current_password
            payload["newPassword"] = new_password
        return self.request("PUT", "/auth/profile", json=payload)

    def list_institutions(self) -> list[Institution]:
        body = self.request("GET", "/institutions")
        with _decoding("institution"):
            return [institution_from_wire(r) for r in body.get("institutions") or []]

    # -----------------------------------------------------------------------
    # Users (admin only, enforced server-side)
    # -----------------------------------------------------------------------

    def list_users(self, institution: Optional[str] = None) -> list[User]:
        body = self.request("GET", "/users")
        with _decoding("user"):
            return [user_from_wire(r, institution=institution) for r in body.get("users") or []]

    def create_user(
        self,
        email: str,
        role: Role,
        department: Optional[str] = None,
        class_level: Optional[str] = None,
    ) -> dict[str, Any]:
        return self.request("POST", "/users", json=user_to_wire(email, role, department, class_level))

    def delete_user(self, user_id: str) -> None:
        self.request("DELETE", f"/users/{user_id}")

    # -----------------------------------------------------------------------
    # Events
    # -----------------------------------------------------------------------

    def list_events(self, filter: Optional[str] = None) -> list[Event]:
        params = {"filter": filter} if filter else None
        body = self.request("GET", "/events", params=params)
        with _decoding("event"):
            return [event_from_wire(r) for r in body.get("events") or []]

    def get_event(self, event_id: str) -> Event:
        body = self.request("GET", f"/events/{event_id}")
        with _decoding("event"):
            return event_from_wire(body["event"])

    def get_registrations(self, event_id: str) -> list[Registration]:
        body = self.request("GET", f"/events/{event_id}")
        with _decoding("registration"):
            return [registration_from_wire(r) for r in body["event"].get("registrations") or []]

    def create_event(self, draft: EventDraft) -> dict[str, Any]:
        return self.request("POST", "/events", json=event_to_wire(draft))

    def delete_event(self, event_id: str) -> None:
        self.request("DELETE", f"/events/{event_id}")

    def register_for_event(self, event_id: str) -> None:
        self.request("POST", f"/events/{event_id}/register")

    def submit_feedback(self, event_id: str, rating: int, comment: str) -> None:
        self.request("POST", f"/events/{event_id}/feedback", json={"rating": rating, "comment": comment})
