"""Media RSS feed client.

Downloads a feed with httpx and parses it with feedparser, reducing each
item to the handful of fields the importer needs. Fetch behaviour is fixed
per client through FeedFetchOptions; callers cannot tune it per call.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import feedparser
import httpx

from app.core.config import Settings, get_settings
from app.core.exceptions import FeedFetchError


@dataclass(frozen=True)
class FeedFetchOptions:
    """Fixed fetch and parse configuration."""

    timeout_seconds: float = 30.0
    user_agent: str = "PhotoFeedIngest/0.1"
    follow_redirects: bool = True
    # Accept feeds feedparser flags as malformed as long as it recovered entries
    allow_bozo: bool = True
    sanitize_html: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> FeedFetchOptions:
        return cls(
            timeout_seconds=settings.feed_fetch_timeout_seconds,
            user_agent=settings.feed_user_agent,
            follow_redirects=settings.feed_follow_redirects,
            allow_bozo=settings.feed_allow_bozo,
            sanitize_html=settings.feed_sanitize_html,
        )


@dataclass(frozen=True)
class RawEntry:
    """One feed item as delivered by the feed, before validation.

    Values are passed through untouched; ``published`` may be a
    ``time.struct_time``, a datetime or a string depending on the source.
    """

    entry_id: Any = None
    title: Any = None
    summary: Any = None
    published: Any = None
    thumbnail_url: Any = None
    url: Any = None


@dataclass
class ParsedFeed:
    """A fetched feed: its title and entries in document order."""

    url: str
    title: str | None = None
    entries: list[RawEntry] = field(default_factory=list)  # pyright: ignore[reportUnknownVariableType]


@runtime_checkable
class FeedClient(Protocol):
    """Fetches and parses a feed."""

    async def fetch(self, url: str) -> ParsedFeed:
        """Fetch the feed at ``url``.

        Raises:
            FeedFetchError: On network, HTTP, or parse failure.
        """
        ...


def _first_media_url(items: Any) -> str | None:
    """URL of the first ``media:*`` element that has one."""
    if not items:
        return None
    for item in items:
        url = item.get("url") if isinstance(item, dict) else None
        if url:
            return str(url)
    return None


def raw_entry_from_feedparser(entry: Any) -> RawEntry:
    """Reduce a feedparser entry to a RawEntry.

    The photo URL comes from ``media:content`` and falls back to the item
    link; the timestamp prefers feedparser's normalised ``published_parsed``
    and falls back to the raw ``published`` text.
    """
    published = entry.get("published_parsed") or entry.get("published")
    if published is None:
        published = entry.get("updated_parsed") or entry.get("updated")

    return RawEntry(
        entry_id=entry.get("id"),
        title=entry.get("title"),
        summary=entry.get("summary"),
        published=published,
        thumbnail_url=_first_media_url(entry.get("media_thumbnail")),
        url=_first_media_url(entry.get("media_content")) or entry.get("link"),
    )


class FeedparserClient:
    """FeedClient using httpx for transport and feedparser for parsing.

    An ``http_client`` may be supplied (tests pass one with a mock
    transport); otherwise one is created per fetch.
    """

    def __init__(
        self,
        options: FeedFetchOptions | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.options = options or FeedFetchOptions.from_settings(get_settings())
        self._http_client = http_client

    async def fetch(self, url: str) -> ParsedFeed:
        content, headers = await self._download(url)

        try:
            # feedparser is synchronous; keep it off the event loop
            parsed = await asyncio.to_thread(
                feedparser.parse,
                content,
                response_headers=headers,
                sanitize_html=self.options.sanitize_html,
            )
        except Exception as e:  # feedparser can raise on pathological input
            raise FeedFetchError(url, message=f"Feed could not be parsed: {e}") from e

        if parsed.get("bozo"):
            cause = parsed.get("bozo_exception")
            if not self.options.allow_bozo or not parsed.entries:
                raise FeedFetchError(
                    url,
                    message=f"Malformed feed: {cause}",
                    details={"bozo_exception": type(cause).__name__ if cause else None},
                )

        if not parsed.get("version") and not parsed.entries:
            raise FeedFetchError(url, message="Response is not a recognised feed")

        return ParsedFeed(
            url=url,
            title=parsed.feed.get("title"),
            entries=[raw_entry_from_feedparser(e) for e in parsed.entries],
        )

    async def _download(self, url: str) -> tuple[bytes, dict[str, str]]:
        headers = {"User-Agent": self.options.user_agent}
        try:
            if self._http_client is not None:
                response = await self._get(self._http_client, url, headers)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._get(client, url, headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise FeedFetchError(
                url,
                message=f"Feed request failed: {type(e).__name__}: {e}",
            ) from e
        return response.content, dict(response.headers)

    async def _get(
        self,
        client: httpx.AsyncClient,
        url: str,
        headers: dict[str, str],
    ) -> httpx.Response:
        return await client.get(
            url,
            headers=headers,
            timeout=self.options.timeout_seconds,
            follow_redirects=self.options.follow_redirects,
        )
