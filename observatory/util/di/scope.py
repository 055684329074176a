"""Dishka scopes for the observatory service."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """Dependency injection scopes.

    Hierarchy: APP -> REQUEST

    - APP: process lifetime (HTTP client, token caches, adapter registry)
    - REQUEST: one snapshot request, from the API or the CLI
    """

    APP = new_scope("APP")
    REQUEST = new_scope("REQUEST")
