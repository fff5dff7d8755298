"""
Authorization gate.
Decides whether an actor may mutate contact pages. How actors authenticate
is outside this service; the gate only sees the presented bearer token.
"""

import secrets
from typing import Iterable, Optional, Protocol


class AuthorizationGate(Protocol):
    """Anything that can answer "may this actor mutate?"."""

    def is_authorized(self, actor: Optional[str]) -> bool:
        ...


class TokenAuthorizationGate:
    """Gate backed by a static list of admin API tokens."""

    def __init__(self, tokens: Optional[Iterable[str]] = None):
        self._tokens = [token for token in (tokens or []) if token]

    def is_authorized(self, actor: Optional[str]) -> bool:
        if not actor:
            return False
        # Compare against every token so timing does not reveal which one matched
        matched = False
        for token in self._tokens:
            matched |= secrets.compare_digest(actor.encode(), token.encode())
        return matched
