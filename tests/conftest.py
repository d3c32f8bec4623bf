"""Shared fixtures: connector configs and in-memory connector doubles."""
import pytest

from contentflow_core.config import GitHubConfig, GoogleCalendarConfig, NotionConfig, ResearchConfig
from contentflow_core.errors import AuthRequiredError, BranchAlreadyExistsError, RemoteCallError
from contentflow_core.schemas import (
    Branch,
    CalendarEvent,
    Issue,
    Page,
    PullRequest,
    ResearchMode,
    SearchHit,
    SearchResults,
)


@pytest.fixture
def github_config():
    return GitHubConfig(token="ghp_test", owner="acme", repo="content")


@pytest.fixture
def notion_config():
    return NotionConfig(token="secret_test", database_id="db-123")


@pytest.fixture
def calendar_config(tmp_path):
    return GoogleCalendarConfig(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://localhost:3000/auth/google/callback",
        tokens_file=tmp_path / "google-tokens.json",
    )


@pytest.fixture
def research_config():
    return ResearchConfig(enabled=False)


class FakeGitHub:
    """Records calls; `fail` maps a method name to the exception it raises."""

    def __init__(self, fail=None):
        self.fail = fail or {}
        self.calls = []

    def _check(self, method, arguments):
        self.calls.append((method, arguments))
        if method in self.fail:
            raise self.fail[method]

    async def create_issue(self, arguments):
        self._check("create_issue", arguments)
        return Issue(
            number=42,
            title=arguments["title"],
            state="open",
            html_url="https://github.com/acme/content/issues/42",
            labels=["content"] + arguments.get("labels", []),
        )

    async def create_branch(self, arguments):
        self._check("create_branch", arguments)
        return Branch(
            name=arguments["branchName"],
            base="main",
            sha="abc123",
            html_url=f"https://github.com/acme/content/tree/{arguments['branchName']}",
        )

    async def create_pull_request(self, arguments):
        self._check("create_pull_request", arguments)
        return PullRequest(
            number=7,
            title=arguments["title"],
            state="open",
            html_url="https://github.com/acme/content/pull/7",
            head=arguments["head"],
            base="main",
        )


class FakeNotion:
    def __init__(self, fail=None, content="Draft body text"):
        self.fail = fail or {}
        self.content = content
        self.calls = []

    def _check(self, method, arguments):
        self.calls.append((method, arguments))
        if method in self.fail:
            raise self.fail[method]

    async def create_page(self, arguments):
        self._check("create_page", arguments)
        return Page(
            id="page-1",
            title=arguments["title"],
            status="Draft",
            tags=arguments.get("tags", []),
            url="https://notion.so/page1",
            content=arguments["content"],
        )

    async def get_page(self, arguments):
        self._check("get_page", arguments)
        return Page(
            id=arguments["pageId"],
            title="Testing Guide",
            status="Draft",
            tags=["blog"],
            url="https://notion.so/page1",
            content=self.content,
        )

    async def update_page(self, arguments):
        self._check("update_page", arguments)
        return Page(id=arguments["pageId"], title="Testing Guide", status=arguments["status"], url="https://notion.so/page1")


class FakeCalendar:
    def __init__(self, fail=None):
        self.fail = fail or {}
        self.calls = []

    async def create_event(self, arguments):
        self.calls.append(("create_event", arguments))
        if "create_event" in self.fail:
            raise self.fail["create_event"]
        number = len(self.calls)
        return CalendarEvent(
            id=f"evt{number}",
            title=arguments["title"],
            start=arguments["startTime"],
            end=arguments["endTime"],
            attendees=arguments.get("attendees", []),
            html_link=f"https://calendar.google.com/event?eid=evt{number}",
        )


class FakeResearch:
    """Search double; `fail_queries` lists queries that raise RemoteCallError."""

    def __init__(self, fail_queries=(), fail_all=False, snippet=None):
        self.fail_queries = set(fail_queries)
        self.fail_all = fail_all
        self.snippet = snippet
        self.queries = []

    async def search(self, arguments):
        query = arguments["query"]
        self.queries.append(query)
        if self.fail_all or query in self.fail_queries:
            raise RemoteCallError("Failed to perform web search: timeout")
        return SearchResults(
            query=query,
            mode=ResearchMode.LIVE,
            hits=[SearchHit(title=f"About {query}", url="https://example.com/a", snippet=self.snippet or f"{query} explained")],
        )


@pytest.fixture
def fakes():
    """Factory for a (github, notion, calendar, research) tuple of doubles."""
    def _make(github=None, notion=None, calendar=None, research=None):
        return (
            github or FakeGitHub(),
            notion or FakeNotion(),
            calendar or FakeCalendar(),
            research or FakeResearch(),
        )
    return _make


def auth_required():
    return AuthRequiredError(
        "Google Calendar authentication required.",
        "Run the OAuth setup (`contentflow-oauth`) and open /auth to re-authenticate.",
    )


def branch_exists(name="content/page1"):
    return BranchAlreadyExistsError(name)
