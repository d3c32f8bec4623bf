"""MCP tool definitions for the content workflow server.

This module is the definitive tool catalog. Every tool listed here has a
handler in handlers.HANDLERS and vice versa.
"""

from mcp.types import Tool

REPOSITORY_PROPERTY = {
    "type": "string",
    "description": "Target repository as 'repo' or 'owner/repo' (default: configured repository)"
}


def get_tools() -> list[Tool]:
    """Get the list of all MCP tools for content workflow automation."""
    return [
        # ============================================================================
        # GitHub Tools
        # ============================================================================
        Tool(
            name="github_create_issue",
            description="Create a new GitHub issue for content development. "
                       "The 'content' label is always applied.",
            inputSchema={
                "type": "object",
                "properties": {
                    "title": {"type": "string", "description": "Issue title"},
                    "body": {"type": "string", "description": "Issue description"},
                    "labels": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Labels to apply to the issue"
                    },
                    "repository": REPOSITORY_PROPERTY,
                },
                "required": ["title", "body"]
            }
        ),
        Tool(
            name="github_create_branch",
            description="Create a new branch for content development from the head of a base branch.",
            inputSchema={
                "type": "object",
                "properties": {
                    "branchName": {"type": "string", "description": "Name of the new branch"},
                    "baseBranch": {
                        "type": "string",
                        "description": "Base branch to create from (default: repository default branch, usually 'main')"
                    },
                    "repository": REPOSITORY_PROPERTY,
                },
                "required": ["branchName"]
            }
        ),
        Tool(
            name="github_create_pull_request",
            description="Create a pull request for content changes.",
            inputSchema={
                "type": "object",
                "properties": {
                    "title": {"type": "string", "description": "PR title"},
                    "body": {"type": "string", "description": "PR description"},
                    "head": {"type": "string", "description": "Source branch"},
                    "base": {"type": "string", "description": "Target branch (default: 'main')"},
                    "repository": REPOSITORY_PROPERTY,
                },
                "required": ["title", "body", "head"]
            }
        ),
        Tool(
            name="github_list_issues",
            description="List issues in the content repository (pull requests are excluded).",
            inputSchema={
                "type": "object",
                "properties": {
                    "state": {
                        "type": "string",
                        "enum": ["open", "closed", "all"],
                        "description": "Issue state filter (default: open)"
                    },
                    "labels": {"type": "string", "description": "Comma-separated label filter"},
                    "limit": {"type": "integer", "description": "Maximum issues to return (default: 10, max: 100)"},
                    "repository": REPOSITORY_PROPERTY,
                }
            }
        ),
        Tool(
            name="github_get_repository",
            description="Get repository details: description, stars, forks, language and URL.",
            inputSchema={
                "type": "object",
                "properties": {
                    "repository": REPOSITORY_PROPERTY,
                }
            }
        ),
        # ============================================================================
        # Notion Tools
        # ============================================================================
        Tool(
            name="notion_create_page",
            description="Create a new page in the Notion content database for content planning. "
                       "New pages start in 'Draft' status.",
            inputSchema={
                "type": "object",
                "properties": {
                    "title": {"type": "string", "description": "Page title"},
                    "content": {"type": "string", "description": "Page content in markdown"},
                    "tags": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Tags for categorization"
                    }
                },
                "required": ["title", "content"]
            }
        ),
        Tool(
            name="notion_search_pages",
            description="Search for pages in the Notion content database.",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Search query"},
                    "filter": {"type": "string", "description": "Only keep pages whose status or one of whose tags matches"}
                },
                "required": ["query"]
            }
        ),
        Tool(
            name="notion_update_page",
            description="Update an existing Notion page: title, status, or append content.",
            inputSchema={
                "type": "object",
                "properties": {
                    "pageId": {"type": "string", "description": "Notion page ID"},
                    "title": {"type": "string", "description": "New title"},
                    "content": {"type": "string", "description": "Content to append"},
                    "status": {
                        "type": "string",
                        "enum": ["Draft", "Review", "Published", "draft", "review", "published"],
                        "description": "Content status"
                    }
                },
                "required": ["pageId"]
            }
        ),
        Tool(
            name="notion_get_page",
            description="Get a Notion page with its properties and text content.",
            inputSchema={
                "type": "object",
                "properties": {
                    "pageId": {"type": "string", "description": "Notion page ID"}
                },
                "required": ["pageId"]
            }
        ),
        Tool(
            name="notion_list_database_pages",
            description="List pages in the content database, newest first, optionally filtered by status.",
            inputSchema={
                "type": "object",
                "properties": {
                    "status": {
                        "type": "string",
                        "enum": ["Draft", "Review", "Published", "draft", "review", "published"],
                        "description": "Status filter"
                    },
                    "limit": {"type": "integer", "description": "Maximum pages to return (default: 10, max: 100)"}
                }
            }
        ),
        # ============================================================================
        # Google Calendar Tools
        # ============================================================================
        Tool(
            name="calendar_create_event",
            description="Create a calendar event for content deadlines. "
                       "Requires Google Calendar credentials from the OAuth setup.",
            inputSchema={
                "type": "object",
                "properties": {
                    "title": {"type": "string", "description": "Event title"},
                    "description": {"type": "string", "description": "Event description"},
                    "startTime": {"type": "string", "description": "Start time (ISO 8601)"},
                    "endTime": {"type": "string", "description": "End time (ISO 8601)"},
                    "attendees": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Email addresses of attendees"
                    }
                },
                "required": ["title", "startTime", "endTime"]
            }
        ),
        Tool(
            name="calendar_list_events",
            description="List upcoming calendar events (default window: next 7 days).",
            inputSchema={
                "type": "object",
                "properties": {
                    "timeMin": {"type": "string", "description": "Start of the window (ISO 8601, default: now)"},
                    "timeMax": {"type": "string", "description": "End of the window (ISO 8601, default: timeMin + 7 days)"},
                    "maxResults": {"type": "integer", "description": "Maximum number of events to return", "default": 10}
                }
            }
        ),
        Tool(
            name="calendar_update_event",
            description="Update the title, description or times of a calendar event.",
            inputSchema={
                "type": "object",
                "properties": {
                    "eventId": {"type": "string", "description": "Calendar event ID"},
                    "title": {"type": "string", "description": "New title"},
                    "description": {"type": "string", "description": "New description"},
                    "startTime": {"type": "string", "description": "New start time (ISO 8601)"},
                    "endTime": {"type": "string", "description": "New end time (ISO 8601)"}
                },
                "required": ["eventId"]
            }
        ),
        Tool(
            name="calendar_delete_event",
            description="Delete a calendar event. Attendees are notified.",
            inputSchema={
                "type": "object",
                "properties": {
                    "eventId": {"type": "string", "description": "Calendar event ID"}
                },
                "required": ["eventId"]
            }
        ),
        # ============================================================================
        # Web Research Tools
        # ============================================================================
        Tool(
            name="web_search",
            description="Search the web for content research.",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Search query"},
                    "maxResults": {"type": "integer", "description": "Maximum number of results", "default": 5}
                },
                "required": ["query"]
            }
        ),
        Tool(
            name="web_extract_content",
            description="Extract the title, description and main text from a web page.",
            inputSchema={
                "type": "object",
                "properties": {
                    "url": {"type": "string", "description": "URL to extract content from"}
                },
                "required": ["url"]
            }
        ),
        # ============================================================================
        # Workflow Tools
        # ============================================================================
        Tool(
            name="workflow_create_content_plan",
            description="Create a complete content plan: research the topic, create a planning page, "
                       "open a tracking issue and schedule milestone and deadline events. "
                       "Individual step failures are reported without aborting the plan.",
            inputSchema={
                "type": "object",
                "properties": {
                    "topic": {"type": "string", "description": "Content topic"},
                    "contentType": {"type": "string", "description": "Type of content (blog, video, etc.)"},
                    "deadline": {"type": "string", "description": "Deadline (ISO 8601)"},
                    "assignee": {"type": "string", "description": "Person responsible for the content (email to invite them)"}
                },
                "required": ["topic", "contentType", "deadline"]
            }
        ),
        Tool(
            name="workflow_publish_content",
            description="Publish content: fetch the Notion page, create a branch, open a pull request "
                       "and move the page to Review.",
            inputSchema={
                "type": "object",
                "properties": {
                    "contentId": {"type": "string", "description": "Content page ID from Notion"},
                    "repository": {"type": "string", "description": "GitHub repository ('repo' or 'owner/repo')"},
                    "branch": {"type": "string", "description": "Branch to create for changes (default: content/<contentId>)"}
                },
                "required": ["contentId", "repository"]
            }
        ),
        Tool(
            name="workflow_research_topic",
            description="Research a topic, document the findings in Notion and open a tracking issue.",
            inputSchema={
                "type": "object",
                "properties": {
                    "topic": {"type": "string", "description": "Topic to research"},
                    "depth": {
                        "type": "string",
                        "enum": ["basic", "comprehensive"],
                        "description": "Research depth: basic issues one query, comprehensive five",
                        "default": "comprehensive"
                    }
                },
                "required": ["topic"]
            }
        ),
    ]
