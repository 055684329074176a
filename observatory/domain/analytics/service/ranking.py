"""Deduplication and ranking of merged events."""

import re
from collections.abc import Iterable

from observatory.domain.shared.model.record import CanonicalEvent, event_sort_key

_WHITESPACE = re.compile(r"\s+")

# Kinds deduplicated by headline as well as by id; wire stories repeat across outlets
TITLE_DEDUP_KINDS = frozenset({"news"})


def title_key(title: str) -> str:
    return _WHITESPACE.sub("", title.lower()[:50])


def dedup(events: Iterable[CanonicalEvent]) -> list[CanonicalEvent]:
    """Drop repeated ids and, for news, repeated headlines. First occurrence wins."""
    seen_ids: set[str] = set()
    seen_titles: set[str] = set()
    unique: list[CanonicalEvent] = []

    for event in events:
        if event.id in seen_ids:
            continue
        if event.kind in TITLE_DEDUP_KINDS:
            key = title_key(event.label)
            if key in seen_titles:
                continue
            seen_titles.add(key)
        seen_ids.add(event.id)
        unique.append(event)

    return unique


def rank(events: Iterable[CanonicalEvent]) -> list[CanonicalEvent]:
    """Most severe first, then most recent first; ties keep input order."""
    return sorted(events, key=event_sort_key)
