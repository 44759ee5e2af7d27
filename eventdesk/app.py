"""
Application wiring.

build_app creates every long-lived object exactly once and hands the same
instances to whoever needs them; no view builds its own session or store.
"""

from __future__ import annotations

from dataclasses import dataclass

from eventdesk.api import ApiClient
from eventdesk.config import Settings
from eventdesk.session import SessionStore
from eventdesk.storage import TokenStore
from eventdesk.store import DomainStore


@dataclass
class App:
    settings: Settings
    tokens: TokenStore
    api: ApiClient
    session: SessionStore
    store: DomainStore


def build_app(settings: Settings, api: ApiClient | None = None) -> App:
    tokens = TokenStore(settings.session_file)
    if api is None:
        api = ApiClient(settings.api_url, token_getter=tokens.load, timeout=settings.timeout)
    session = SessionStore(api, tokens)
    store = DomainStore(api, session)
    return App(settings=settings, tokens=tokens, api=api, session=session, store=store)
