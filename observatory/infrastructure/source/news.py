"""News intelligence: GDELT doc API articles, Hacker News top stories and Reddit hot posts."""

import asyncio
import hashlib
import re

from pydantic import BaseModel, Field

from observatory.domain.shared.error import ParseError
from observatory.domain.shared.model.record import CanonicalEvent, Category, Severity
from observatory.infrastructure.source.base import HttpSourceAdapter, SourcePayload, parse_body
from observatory.infrastructure.source.parsing import parse_timestamp
from observatory.sdk.source.config import SourceConfig

_TAG_PATTERNS: dict[str, re.Pattern[str]] = {
    "military": re.compile(r"military|army|navy|defense|weapon"),
    "cyber": re.compile(r"cyber|hack|breach|malware|security"),
    "political": re.compile(r"politic|government|election|diplomat"),
    "economic": re.compile(r"economy|market|trade|inflation"),
    "climate": re.compile(r"climate|environment|emission|warming"),
    "health": re.compile(r"health|pandemic|virus|disease|covid"),
    "tech": re.compile(r"tech|ai|artificial intelligence|software"),
    "crypto": re.compile(r"crypto|bitcoin|ethereum|blockchain"),
    "conflict": re.compile(r"war|conflict|attack|strike"),
}

_TITLE_PREFIXES = (
    re.compile(r"^\[.*?\]\s*"),
    re.compile(r"^BREAKING:\s*", re.IGNORECASE),
    re.compile(r"^UPDATE:\s*", re.IGNORECASE),
)


def clean_title(title: str) -> str:
    for pattern in _TITLE_PREFIXES:
        title = pattern.sub("", title)
    return title.strip()[:200]


def extract_tags(text: str) -> list[str]:
    lower = text.lower()
    return [tag for tag, pattern in _TAG_PATTERNS.items() if pattern.search(lower)][:5]


def tone_severity(tone: float | None) -> Severity:
    if tone is None:
        return Severity.LOW
    if tone <= -5:
        return Severity.CRITICAL
    if tone <= -2:
        return Severity.HIGH
    if tone <= 0:
        return Severity.MEDIUM
    return Severity.LOW


def score_severity(score: int, thresholds: tuple[int, int, int] = (500, 200, 50)) -> Severity:
    """Critical, high and medium cutoffs on a community score."""
    critical, high, medium = thresholds
    if score >= critical:
        return Severity.CRITICAL
    if score >= high:
        return Severity.HIGH
    if score >= medium:
        return Severity.MEDIUM
    return Severity.LOW


# =============================================================================
# GDELT
# =============================================================================


class GdeltConfig(SourceConfig):
    limit: int = Field(default=25, ge=0)
    url: str = "https://api.gdeltproject.org/api/v2/doc/doc"
    query: str = "conflict OR crisis OR military"
    timespan: str = "1d"


class GdeltArticle(BaseModel):
    url: str
    title: str
    seendate: str | None = None
    domain: str | None = None
    language: str | None = None
    sourcecountry: str | None = None
    tone: float | None = None


class GdeltResponse(BaseModel):
    articles: list[GdeltArticle] = Field(default_factory=list)


class GdeltAdapter(HttpSourceAdapter[GdeltConfig]):
    """Recent news articles matching a query, classified by tone.

    GDELT answers rate-limit notices as plain text with a 200 status; such
    bodies are rejected as parse errors.
    """

    name = "gdelt"
    config_class = GdeltConfig

    async def collect(self) -> SourcePayload:
        response = await self.request(
            self._config.url,
            params={
                "query": self._config.query,
                "mode": "artlist",
                "maxrecords": self._config.limit,
                "timespan": self._config.timespan,
                "format": "json",
                "sort": "datedesc",
            },
        )
        content_type = response.headers.get("content-type", "")
        text = response.text.strip()
        if "application/json" not in content_type or not text.startswith(("{", "[")):
            raise ParseError(f"GDELT returned a non-JSON body ({content_type or 'no content-type'}): {text[:50]!r}")

        body: GdeltResponse = parse_body(response, GdeltResponse)
        now = self._clock.now()

        events = []
        for article in body.articles:
            digest = hashlib.sha1(article.url.encode()).hexdigest()[:12]
            domain = article.domain or "news"
            events.append(
                CanonicalEvent(
                    id=f"GDELT-{digest}",
                    category=Category.INTEL,
                    kind="news",
                    severity=tone_severity(article.tone),
                    timestamp=parse_timestamp(article.seendate, now),
                    label=clean_title(article.title),
                    indicator=article.url,
                    source="GDELT",
                    region=article.sourcecountry or None,
                    group=domain,
                    tags=frozenset(extract_tags(article.title)),
                    metadata={
                        "url": article.url,
                        "domain": domain,
                        "language": article.language,
                        "tone": article.tone,
                    },
                )
            )
        return SourcePayload(events=events)


# =============================================================================
# Hacker News
# =============================================================================


class HackerNewsConfig(SourceConfig):
    limit: int = Field(default=15, ge=0)
    base_url: str = "https://hacker-news.firebaseio.com/v0"


class HNItem(BaseModel):
    id: int
    type: str = "story"
    title: str = ""
    url: str | None = None
    by: str | None = None
    score: int = 0
    descendants: int | None = None
    time: int | None = None


class HackerNewsAdapter(HttpSourceAdapter[HackerNewsConfig]):
    """Top stories by score. Item lookups are follow-ups; a failed lookup drops that story."""

    name = "hackernews"
    config_class = HackerNewsConfig

    async def collect(self) -> SourcePayload:
        base = self._config.base_url
        story_ids: list[int] = await self.get_json(f"{base}/topstories.json", list[int])
        items = await asyncio.gather(
            *(
                self.try_get_json(f"{base}/item/{story_id}.json", HNItem | None)
                for story_id in story_ids[: self._config.limit]
            )
        )
        now = self._clock.now()

        events = []
        for item in items:
            if item is None or item.type != "story":
                continue
            events.append(
                CanonicalEvent(
                    id=f"HN-{item.id}",
                    category=Category.INTEL,
                    kind="news",
                    severity=score_severity(item.score),
                    timestamp=parse_timestamp(item.time, now),
                    label=item.title,
                    indicator=item.url or f"https://news.ycombinator.com/item?id={item.id}",
                    source="Hacker News",
                    tags=frozenset(["tech", "hn", *extract_tags(item.title)]),
                    metadata={
                        "url": item.url,
                        "score": item.score,
                        "comments": item.descendants or 0,
                        "author": item.by,
                    },
                )
            )
        return SourcePayload(events=events)


# =============================================================================
# Reddit
# =============================================================================

# Subreddits monitored when no explicit source list is configured
DEFAULT_SUBREDDITS: tuple[str, ...] = ("worldnews", "technology")

REDDIT_SCORE_THRESHOLDS = (10_000, 5_000, 1_000)


class RedditConfig(SourceConfig):
    limit: int = Field(default=15, ge=0)
    base_url: str = "https://www.reddit.com"
    subreddit: str = "worldnews"


class RedditPost(BaseModel):
    id: str
    title: str
    subreddit: str = ""
    author: str | None = None
    score: int = 0
    num_comments: int = 0
    created_utc: float | None = None
    permalink: str = ""
    domain: str | None = None
    stickied: bool = False


class RedditChild(BaseModel):
    data: RedditPost


class RedditListing(BaseModel):
    children: list[RedditChild] = Field(default_factory=list)


class RedditResponse(BaseModel):
    data: RedditListing = Field(default_factory=RedditListing)


class RedditAdapter(HttpSourceAdapter[RedditConfig]):
    """Hot posts of one subreddit, ranked by score.

    One adapter instance per subreddit; source ids are ``reddit:<subreddit>``.
    Pinned moderator posts are skipped.
    """

    name = "reddit"
    config_class = RedditConfig

    async def collect(self) -> SourcePayload:
        subreddit = self._config.subreddit
        body: RedditResponse = await self.get_json(
            f"{self._config.base_url}/r/{subreddit}/hot.json",
            RedditResponse,
            params={"limit": self._config.limit},
        )
        now = self._clock.now()

        events = []
        for child in body.data.children:
            post = child.data
            if post.stickied:
                continue
            events.append(
                CanonicalEvent(
                    id=f"REDDIT-{post.id}",
                    category=Category.INTEL,
                    kind="news",
                    severity=score_severity(post.score, REDDIT_SCORE_THRESHOLDS),
                    timestamp=parse_timestamp(post.created_utc, now),
                    label=clean_title(post.title),
                    indicator=f"https://reddit.com{post.permalink}",
                    source="Reddit",
                    group=f"r/{post.subreddit or subreddit}",
                    tags=frozenset([subreddit, *extract_tags(post.title)]),
                    metadata={
                        "score": post.score,
                        "comments": post.num_comments,
                        "author": post.author,
                        "domain": post.domain,
                    },
                )
            )
        return SourcePayload(events=events)
