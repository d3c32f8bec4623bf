"""MCP tool handlers.

All handlers follow a consistent pattern:
- Accept: arguments dict and the Services container
- Return: list[TextContent] with a single text block
- Delegate validation and the vendor call to a connector or the orchestrator
- Use formatters for consistent output

Errors (ValidationError, RemoteCallError, AuthRequiredError) propagate to
`dispatch`, which logs them and re-raises so the server reports a tool error.
"""
import logging
from typing import Awaitable, Callable, Optional

from mcp.types import TextContent

from contentflow_core.errors import ContentFlowError, ValidationError
from contentflow_core.services import Services

from . import formatters

logger = logging.getLogger("contentflow-mcp.handlers")

Handler = Callable[[dict, Services], Awaitable[list[TextContent]]]


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


# ============================================================================
# GitHub Handlers
# ============================================================================

async def handle_github_create_issue(arguments: dict, services: Services) -> list[TextContent]:
    issue = await services.github.create_issue(arguments)
    logger.info(f"Successfully created issue #{issue.number}")
    return _text(formatters.format_issue(issue))


async def handle_github_create_branch(arguments: dict, services: Services) -> list[TextContent]:
    branch = await services.github.create_branch(arguments)
    return _text(formatters.format_branch(branch))


async def handle_github_create_pull_request(arguments: dict, services: Services) -> list[TextContent]:
    pr = await services.github.create_pull_request(arguments)
    logger.info(f"Successfully opened PR #{pr.number}")
    return _text(formatters.format_pull_request(pr))


async def handle_github_list_issues(arguments: dict, services: Services) -> list[TextContent]:
    issues = await services.github.list_issues(arguments)
    return _text(formatters.format_issue_list(issues))


async def handle_github_get_repository(arguments: dict, services: Services) -> list[TextContent]:
    repo = await services.github.get_repository_info(arguments)
    return _text(formatters.format_repository(repo))


# ============================================================================
# Notion Handlers
# ============================================================================

async def handle_notion_create_page(arguments: dict, services: Services) -> list[TextContent]:
    page = await services.notion.create_page(arguments)
    logger.info(f"Successfully created page {page.id}")
    return _text(formatters.format_page(page))


async def handle_notion_search_pages(arguments: dict, services: Services) -> list[TextContent]:
    pages = await services.notion.search_pages(arguments)
    query = arguments.get("query", "")
    return _text(formatters.format_page_list(pages, f"🔍 Found {len(pages)} pages matching \"{query}\":"))


async def handle_notion_update_page(arguments: dict, services: Services) -> list[TextContent]:
    page = await services.notion.update_page(arguments)
    return _text(formatters.format_page(page, action="updated"))


async def handle_notion_get_page(arguments: dict, services: Services) -> list[TextContent]:
    page = await services.notion.get_page(arguments)
    return _text(formatters.format_page_details(page))


async def handle_notion_list_database_pages(arguments: dict, services: Services) -> list[TextContent]:
    pages = await services.notion.list_database_pages(arguments)
    status = arguments.get("status")
    heading = f"📋 Database pages with status \"{status}\":" if status else "📋 Database pages:"
    return _text(formatters.format_page_list(pages, heading))


# ============================================================================
# Calendar Handlers
# ============================================================================

async def handle_calendar_create_event(arguments: dict, services: Services) -> list[TextContent]:
    event = await services.calendar.create_event(arguments)
    return _text(formatters.format_event(event))


async def handle_calendar_list_events(arguments: dict, services: Services) -> list[TextContent]:
    events = await services.calendar.list_events(arguments)
    return _text(formatters.format_event_list(events))


async def handle_calendar_update_event(arguments: dict, services: Services) -> list[TextContent]:
    event = await services.calendar.update_event(arguments)
    return _text(formatters.format_event(event, action="updated"))


async def handle_calendar_delete_event(arguments: dict, services: Services) -> list[TextContent]:
    event_id = await services.calendar.delete_event(arguments)
    return _text(f"✅ Calendar event deleted successfully!\n\n**Event ID**: {event_id}")


# ============================================================================
# Web Research Handlers
# ============================================================================

async def handle_web_search(arguments: dict, services: Services) -> list[TextContent]:
    results = await services.research.search(arguments)
    return _text(formatters.format_search_results(results))


async def handle_web_extract_content(arguments: dict, services: Services) -> list[TextContent]:
    content = await services.research.extract_content(arguments)
    return _text(formatters.format_extracted_content(content))


# ============================================================================
# Workflow Handlers
# ============================================================================

async def handle_workflow_create_content_plan(arguments: dict, services: Services) -> list[TextContent]:
    """Research → planning page → tracking issue → milestone and deadline events."""
    result = await services.workflow.create_content_plan(arguments)
    return _text(formatters.format_workflow_result(result))


async def handle_workflow_publish_content(arguments: dict, services: Services) -> list[TextContent]:
    """Fetch page → branch → pull request → page status Review."""
    result = await services.workflow.publish_content(arguments)
    return _text(formatters.format_workflow_result(result))


async def handle_workflow_research_topic(arguments: dict, services: Services) -> list[TextContent]:
    """Topic queries → findings page → tracking issue."""
    result = await services.workflow.research_topic(arguments)
    return _text(formatters.format_workflow_result(result))


# Map tool names to handler functions
HANDLERS: dict[str, Handler] = {
    # GitHub handlers
    "github_create_issue": handle_github_create_issue,
    "github_create_branch": handle_github_create_branch,
    "github_create_pull_request": handle_github_create_pull_request,
    "github_list_issues": handle_github_list_issues,
    "github_get_repository": handle_github_get_repository,
    # Notion handlers
    "notion_create_page": handle_notion_create_page,
    "notion_search_pages": handle_notion_search_pages,
    "notion_update_page": handle_notion_update_page,
    "notion_get_page": handle_notion_get_page,
    "notion_list_database_pages": handle_notion_list_database_pages,
    # Calendar handlers
    "calendar_create_event": handle_calendar_create_event,
    "calendar_list_events": handle_calendar_list_events,
    "calendar_update_event": handle_calendar_update_event,
    "calendar_delete_event": handle_calendar_delete_event,
    # Web research handlers
    "web_search": handle_web_search,
    "web_extract_content": handle_web_extract_content,
    # Workflow handlers
    "workflow_create_content_plan": handle_workflow_create_content_plan,
    "workflow_publish_content": handle_workflow_publish_content,
    "workflow_research_topic": handle_workflow_research_topic,
}


async def dispatch(name: str, arguments: Optional[dict], services: Services) -> list[TextContent]:
    """Route a tool call to its handler.

    Raises:
        ValidationError: unknown tool or invalid arguments
        RemoteCallError: a vendor call failed (plain connector tools only)
        AuthRequiredError: calendar credentials are missing (plain connector tools only)
    """
    handler = HANDLERS.get(name)
    if handler is None:
        logger.warning(f"Unknown tool requested: {name}")
        raise ValidationError(f"Unknown tool: {name}")

    try:
        return await handler(arguments or {}, services)
    except ContentFlowError as e:
        logger.error(f"Tool {name} failed: {type(e).__name__}: {e}")
        raise
