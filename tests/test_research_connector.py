"""Tests for the web research connector."""
import httpx
import pytest
import respx

from contentflow_core.config import ResearchConfig
from contentflow_core.connectors.research import DUCKDUCKGO_API_URL, ResearchConnector
from contentflow_core.errors import RemoteCallError, ValidationError
from contentflow_core.schemas import ResearchMode

DDG_RESPONSE = {
    "Heading": "Unit testing",
    "AbstractText": "Unit testing is a software testing method.",
    "AbstractURL": "https://en.wikipedia.org/wiki/Unit_testing",
    "RelatedTopics": [
        {"Text": "Test-driven development - A practice", "FirstURL": "https://duckduckgo.com/TDD"},
        {"Name": "Tools", "Topics": [
            {"Text": "pytest - A Python test framework", "FirstURL": "https://duckduckgo.com/pytest"},
        ]},
    ],
}

ARTICLE = """<html><head><title> Testing Guide </title>
<meta name="description" content="All about tests"></head>
<body><h1>Guide</h1>
<p>Short.</p>
<p>Unit tests exercise one unit of behaviour in isolation from its collaborators.</p>
<li>Integration tests cover the seams between components and external services.</li>
</body></html>"""


class TestDisabledMode:
    """Test placeholder results without network traffic."""

    @pytest.mark.asyncio
    async def test_search_makes_no_requests(self):
        async with ResearchConnector(ResearchConfig(enabled=False)) as research:
            with respx.mock as router:
                results = await research.search({"query": "AI", "maxResults": 5})
                assert router.calls.call_count == 0

        assert results.mode == ResearchMode.DISABLED
        assert len(results.hits) == 3
        assert all(hit.type == "placeholder" for hit in results.hits)

    @pytest.mark.asyncio
    async def test_extract_makes_no_requests(self):
        async with ResearchConnector(ResearchConfig(enabled=False)) as research:
            with respx.mock as router:
                content = await research.extract_content({"url": "https://example.com/post"})
                assert router.calls.call_count == 0

        assert content.mode == ResearchMode.DISABLED
        assert content.url == "https://example.com/post"


class TestLiveMode:
    """Test live search and extraction."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_flattens_topics(self):
        route = respx.get(DUCKDUCKGO_API_URL).mock(return_value=httpx.Response(200, json=DDG_RESPONSE))
        async with ResearchConnector(ResearchConfig(enabled=True)) as research:
            results = await research.search({"query": "unit testing", "maxResults": 5})

        assert route.calls.last.request.url.params["q"] == "unit testing"
        assert [hit.type for hit in results.hits] == ["instant_answer", "related_topic", "related_topic"]
        assert results.hits[2].title == "pytest"

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_respects_max_results(self):
        respx.get(DUCKDUCKGO_API_URL).mock(return_value=httpx.Response(200, json=DDG_RESPONSE))
        async with ResearchConnector(ResearchConfig(enabled=True)) as research:
            results = await research.search({"query": "unit testing", "maxResults": 1})
        assert len(results.hits) == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_empty_answer_is_not_padded(self):
        """Test an empty live answer stays empty instead of falling back to placeholders."""
        respx.get(DUCKDUCKGO_API_URL).mock(return_value=httpx.Response(200, json={"RelatedTopics": []}))
        async with ResearchConnector(ResearchConfig(enabled=True)) as research:
            results = await research.search({"query": "zzz"})
        assert results.hits == []
        assert results.mode == ResearchMode.LIVE

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_failure_raises(self):
        respx.get(DUCKDUCKGO_API_URL).mock(side_effect=httpx.ConnectTimeout("timed out"))
        async with ResearchConnector(ResearchConfig(enabled=True)) as research:
            with pytest.raises(RemoteCallError, match="Failed to perform web search"):
                await research.search({"query": "AI"})

    @pytest.mark.asyncio
    @respx.mock
    async def test_extract_content(self):
        respx.get("https://example.com/post").mock(return_value=httpx.Response(200, text=ARTICLE))
        async with ResearchConnector(ResearchConfig(enabled=True)) as research:
            content = await research.extract_content({"url": "https://example.com/post"})

        assert content.title == "Testing Guide"
        assert content.description == "All about tests"
        assert "Short." not in content.content
        assert content.content.startswith("Unit tests exercise")
        assert "Integration tests" in content.content

    @pytest.mark.asyncio
    async def test_invalid_url(self):
        async with ResearchConnector(ResearchConfig(enabled=True)) as research:
            with pytest.raises(ValidationError, match="url"):
                await research.extract_content({"url": "not a url"})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
