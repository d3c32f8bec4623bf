"""Web-research connector.

Two modes, chosen once from configuration:
- live: DuckDuckGo Instant Answer API for search, direct fetch + BeautifulSoup for extraction
- disabled: deterministic placeholder results, no network traffic

A live call that fails raises RemoteCallError; it never falls back to placeholder data.
"""
import logging
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from ..config import ResearchConfig
from ..schemas import (
    ExtractContentInput,
    ExtractedContent,
    ResearchMode,
    SearchHit,
    SearchInput,
    SearchResults,
    parse_arguments,
)
from .base import BaseConnector

DUCKDUCKGO_API_URL = "https://api.duckduckgo.com/"
SEARCH_TIMEOUT = 10.0
EXTRACT_TIMEOUT = 15.0

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)

# Extraction keeps the first N text elements longer than the minimum length
EXTRACT_MAX_ELEMENTS = 10
EXTRACT_MIN_LENGTH = 50


def _placeholder_hits(query: str, max_results: int) -> list[SearchHit]:
    hosts = ["example.com", "sample.org", "test.net"]
    return [
        SearchHit(
            title=f"Placeholder result {index + 1} for {query}",
            url=f"https://{hosts[index % len(hosts)]}/",
            snippet=f"Web search is disabled; this is placeholder text about {query}.",
            type="placeholder",
        )
        for index in range(min(max_results, len(hosts)))
    ]


class ResearchConnector(BaseConnector):
    """Web search and page extraction."""

    logger = logging.getLogger("contentflow-core.research")

    def __init__(self, config: ResearchConfig, client: Optional[httpx.AsyncClient] = None):
        self.mode = ResearchMode.LIVE if config.enabled else ResearchMode.DISABLED
        super().__init__(client or httpx.AsyncClient(
            timeout=SEARCH_TIMEOUT,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        ))
        if self.mode == ResearchMode.DISABLED:
            self.logger.info("Web research disabled (WEB_SEARCH_ENABLED is not 'true'); returning placeholder results")
        else:
            self.logger.info("Web research enabled (live mode)")

    @property
    def live(self) -> bool:
        return self.mode == ResearchMode.LIVE

    async def search(self, arguments: Optional[dict] = None) -> SearchResults:
        args = parse_arguments(SearchInput, arguments)
        if not self.live:
            return SearchResults(query=args.query, mode=self.mode, hits=_placeholder_hits(args.query, args.max_results))

        response = await self._request(
            "GET", DUCKDUCKGO_API_URL, "perform web search",
            params={"q": args.query, "format": "json", "no_html": "1", "skip_disambig": "1"},
        )
        try:
            data = response.json()
        except ValueError:
            data = {}

        hits = []
        if data.get("AbstractText"):
            hits.append(SearchHit(
                title=data.get("Heading") or "Instant Answer",
                url=data.get("AbstractURL") or "",
                snippet=data["AbstractText"],
                type="instant_answer",
            ))
        for topic in _flatten_topics(data.get("RelatedTopics") or []):
            if len(hits) >= args.max_results:
                break
            text = topic.get("Text") or ""
            hits.append(SearchHit(
                title=text.split(" - ")[0] or "Related Topic",
                url=topic.get("FirstURL") or "",
                snippet=text,
                type="related_topic",
            ))

        self.logger.info(f"Web search '{args.query}' returned {len(hits)} results")
        return SearchResults(query=args.query, mode=self.mode, hits=hits[:args.max_results])

    async def extract_content(self, arguments: Optional[dict] = None) -> ExtractedContent:
        args = parse_arguments(ExtractContentInput, arguments)
        url = str(args.url)
        if not self.live:
            return ExtractedContent(
                url=url,
                mode=self.mode,
                title="Placeholder page",
                description="Web research is disabled.",
                content="Content extraction is disabled; enable WEB_SEARCH_ENABLED=true to fetch real pages.",
            )

        response = await self._request("GET", url, "extract content", timeout=EXTRACT_TIMEOUT)
        soup = BeautifulSoup(response.text, "html.parser")

        title = ""
        if soup.title and soup.title.string:
            title = soup.title.string.strip()
        if not title and soup.find("h1"):
            title = soup.find("h1").get_text(strip=True)

        meta = soup.find("meta", attrs={"name": "description"})
        description = meta.get("content", "").strip() if meta else ""

        body = soup.body or soup
        elements = []
        for element in body.find_all(["p", "h1", "h2", "h3", "h4", "h5", "h6", "li"]):
            text = element.get_text(" ", strip=True)
            if len(text) > EXTRACT_MIN_LENGTH:
                elements.append(text)
            if len(elements) >= EXTRACT_MAX_ELEMENTS:
                break

        self.logger.info(f"Extracted {len(elements)} text elements from {url}")
        return ExtractedContent(
            url=url,
            mode=self.mode,
            title=title or "No title found",
            description=description or "No description available",
            content="\n\n".join(elements),
        )


def _flatten_topics(topics: list) -> list[dict]:
    """Related topics may be grouped under {"Name", "Topics"} entries."""
    flat = []
    for topic in topics:
        if "Topics" in topic:
            flat.extend(t for t in topic["Topics"] if "Text" in t)
        elif "Text" in topic:
            flat.append(topic)
    return flat
