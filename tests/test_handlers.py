"""Tests for the MCP tool catalog and dispatch."""
import pytest

from conftest import FakeCalendar, FakeGitHub, FakeNotion, FakeResearch, auth_required
from contentflow_core.errors import AuthRequiredError, RemoteCallError, ValidationError
from contentflow_core.orchestrator import ContentWorkflowOrchestrator
from contentflow_core.services import Services
from contentflow_mcp import handlers, tools


@pytest.fixture
def services():
    github, notion, calendar, research = FakeGitHub(), FakeNotion(), FakeCalendar(), FakeResearch()
    return Services(
        github=github,
        notion=notion,
        calendar=calendar,
        research=research,
        workflow=ContentWorkflowOrchestrator(github, notion, calendar, research),
    )


class TestToolCatalog:
    """Test the tool catalog matches the handler map."""

    def test_every_tool_has_a_handler(self):
        names = [tool.name for tool in tools.get_tools()]
        assert len(names) == len(set(names))
        assert set(names) == set(handlers.HANDLERS)

    def test_workflow_tools_present(self):
        names = {tool.name for tool in tools.get_tools()}
        assert {"workflow_create_content_plan", "workflow_publish_content", "workflow_research_topic"} <= names

    def test_required_fields_use_aliases(self):
        by_name = {tool.name: tool for tool in tools.get_tools()}
        schema = by_name["workflow_create_content_plan"].inputSchema
        assert schema["required"] == ["topic", "contentType", "deadline"]
        for required in schema["required"]:
            assert required in schema["properties"]


class TestDispatch:
    """Test routing, rendering and error propagation."""

    @pytest.mark.asyncio
    async def test_connector_tool(self, services):
        content = await handlers.dispatch(
            "github_create_issue", {"title": "Write post", "body": "Body"}, services,
        )
        assert len(content) == 1
        assert content[0].type == "text"
        assert "Issue #42" in content[0].text
        assert "https://github.com/acme/content/issues/42" in content[0].text

    @pytest.mark.asyncio
    async def test_workflow_tool_renders_summary(self, services):
        content = await handlers.dispatch("workflow_create_content_plan", {
            "topic": "Unit Testing",
            "contentType": "blog",
            "deadline": "2025-03-01T00:00:00Z",
        }, services)

        text = content[0].text
        assert "Status: complete (5 of 5 steps succeeded)" in text
        assert "https://notion.so/page1" in text

    @pytest.mark.asyncio
    async def test_partial_workflow_is_not_an_error(self, services):
        services.workflow.calendar = FakeCalendar(fail={"create_event": auth_required()})
        content = await handlers.dispatch("workflow_create_content_plan", {
            "topic": "Unit Testing",
            "contentType": "blog",
            "deadline": "2025-03-01T00:00:00Z",
        }, services)

        text = content[0].text
        assert "Status: partial" in text
        assert "milestone event failed:" in text

    @pytest.mark.asyncio
    async def test_unknown_tool(self, services):
        with pytest.raises(ValidationError, match="Unknown tool: github_delete_repo"):
            await handlers.dispatch("github_delete_repo", {}, services)

    @pytest.mark.asyncio
    async def test_connector_errors_propagate(self, services):
        services.github.fail["create_issue"] = RemoteCallError("Failed to create GitHub issue: Bad credentials", 401)
        with pytest.raises(RemoteCallError, match="Bad credentials"):
            await handlers.dispatch("github_create_issue", {"title": "t", "body": "b"}, services)

    @pytest.mark.asyncio
    async def test_calendar_auth_error_propagates(self, services):
        services.calendar.fail["create_event"] = auth_required()
        with pytest.raises(AuthRequiredError):
            await handlers.dispatch("calendar_create_event", {
                "title": "Review",
                "startTime": "2025-03-01T00:00:00Z",
                "endTime": "2025-03-01T01:00:00Z",
            }, services)

    @pytest.mark.asyncio
    async def test_missing_arguments(self, services):
        with pytest.raises(ValidationError, match="contentId"):
            await handlers.dispatch("workflow_publish_content", None, services)

    @pytest.mark.asyncio
    async def test_research_search_tool(self, services):
        content = await handlers.dispatch("web_search", {"query": "pytest"}, services)
        assert "About pytest" in content[0].text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
