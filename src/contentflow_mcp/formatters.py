"""Formatting functions for MCP responses.

Connectors return typed records and workflows return WorkflowResult; this
module is the one place they are rendered to text.
"""
from contentflow_core.schemas import (
    Branch,
    CalendarEvent,
    ExtractedContent,
    Issue,
    Page,
    PullRequest,
    Repository,
    ResearchMode,
    SearchResults,
)
from contentflow_core.workflow import StepStatus, WorkflowResult, WorkflowStatus


def format_issue(issue: Issue) -> str:
    """Format a newly created issue for display."""
    return f"""✅ GitHub issue created successfully!

**Issue #{issue.number}**: {issue.title}
URL: {issue.html_url}
Status: {issue.state}
Labels: {', '.join(issue.labels) or 'none'}"""


def format_issue_list(issues: list[Issue]) -> str:
    if not issues:
        return "📋 No issues found."
    items = "\n\n".join(
        f"• #{issue.number}: {issue.title} ({issue.state})\n"
        f"  Labels: {', '.join(issue.labels) or 'none'}\n"
        f"  URL: {issue.html_url}"
        for issue in issues
    )
    return f"📋 Found {len(issues)} issues:\n\n{items}"


def format_branch(branch: Branch) -> str:
    return f"""✅ Branch '{branch.name}' created successfully from '{branch.base}'!

Commit: {branch.sha}
Branch URL: {branch.html_url}"""


def format_pull_request(pr: PullRequest) -> str:
    return f"""✅ Pull request created successfully!

**PR #{pr.number}**: {pr.title}
URL: {pr.html_url}
Status: {pr.state}
From: {pr.head} → To: {pr.base}"""


def format_repository(repo: Repository) -> str:
    return f"""📁 Repository: {repo.full_name}

Description: {repo.description or 'No description'}
Stars: {repo.stargazers_count}
Forks: {repo.forks_count}
Language: {repo.language or 'Not specified'}
Default branch: {repo.default_branch or 'unknown'}
URL: {repo.html_url}"""


def format_page(page: Page, action: str = "created") -> str:
    """Format a created or updated page, including the id needed for follow-up calls."""
    return f"""✅ Notion page {action} successfully!

**Title**: {page.title}
**Page ID**: {page.id}
**URL**: {page.url}
**Status**: {page.status}
**Tags**: {', '.join(page.tags) or 'None'}"""


def format_page_details(page: Page) -> str:
    return f"""📄 **Page Details**

**Title**: {page.title}
**Page ID**: {page.id}
**Status**: {page.status}
**Tags**: {', '.join(page.tags) or 'None'}
**URL**: {page.url}

**Content**:
{page.content or '(empty)'}"""


def format_page_list(pages: list[Page], heading: str) -> str:
    if not pages:
        return f"{heading}\n\nNo pages found."
    items = "\n\n".join(
        f"• **{page.title}**\n"
        f"  ID: {page.id}\n"
        f"  Status: {page.status}\n"
        f"  Tags: {', '.join(page.tags) or 'None'}\n"
        f"  URL: {page.url}"
        + (f"\n  Created: {page.created_date}" if page.created_date else "")
        + (f"\n  Last edited: {page.last_edited}" if page.last_edited else "")
        for page in pages
    )
    return f"{heading}\n\n{items}"


def format_event(event: CalendarEvent, action: str = "created") -> str:
    return f"""✅ Calendar event {action} successfully!

**Event**: {event.title}
**Event ID**: {event.id}
**Start**: {event.start}
**End**: {event.end}
**Description**: {event.description or 'No description'}
**Attendees**: {', '.join(event.attendees) or 'None'}
**Event URL**: {event.html_link or 'n/a'}"""


def format_event_list(events: list[CalendarEvent]) -> str:
    if not events:
        return "📅 No upcoming calendar events."
    items = "\n\n".join(
        f"• **{event.title}** ({event.id})\n"
        f"  Start: {event.start}\n"
        f"  End: {event.end}\n"
        f"  Attendees: {', '.join(event.attendees) or 'None'}\n"
        f"  URL: {event.html_link or 'n/a'}"
        for event in events
    )
    return f"📅 Upcoming calendar events:\n\n{items}"


def format_search_results(results: SearchResults) -> str:
    heading = f"🔍 **Web Search Results for: \"{results.query}\"**"
    if results.mode == ResearchMode.DISABLED:
        heading += " (web search disabled: placeholder results)"
    if not results.hits:
        return f"{heading}\n\nNo results found."
    items = "\n\n".join(
        f"{index}. **{hit.title}**\n   URL: {hit.url or 'n/a'}\n   {hit.snippet}\n   Type: {hit.type}"
        for index, hit in enumerate(results.hits, start=1)
    )
    return f"{heading}\n\n{items}"


def format_extracted_content(content: ExtractedContent) -> str:
    heading = f"📄 **Content Extraction from: {content.url}**"
    if content.mode == ResearchMode.DISABLED:
        heading += " (web research disabled: placeholder content)"
    return f"""{heading}

**Title**: {content.title}
**Description**: {content.description}

**Content**:
{content.content or 'No content could be extracted from this page.'}

**Word Count**: {content.word_count} words"""


def format_workflow_result(result: WorkflowResult) -> str:
    """Render a composite operation: status, every step, references and research findings."""
    status_emoji = {
        WorkflowStatus.COMPLETE: "✅",
        WorkflowStatus.PARTIAL: "⚠️",
        WorkflowStatus.FAILED: "❌",
    }[result.status]
    step_marker = {
        StepStatus.SUCCEEDED: "✅",
        StepStatus.FAILED: "❌",
        StepStatus.SKIPPED: "⏭️",
    }

    lines = [
        f"{status_emoji} **{result.title}**",
        f"Status: {result.status.value} "
        f"({len(result.completed_steps)} of {len(result.steps)} steps succeeded)",
        "",
        "**Steps**:",
    ]
    for step in result.steps:
        if step.status == StepStatus.SUCCEEDED:
            lines.append(f"{step_marker[step.status]} {step.step}: {step.detail}")
        else:
            lines.append(f"{step_marker[step.status]} {step.step} {step.status.value}: {step.detail}")

    if result.references:
        lines += ["", "**References**:"]
        lines += [f"• {step}: {reference}" for step, reference in result.references]

    research = result.research
    if research is not None:
        lines += ["", f"**Research** ({research.depth.value}):", "Queries used:"]
        lines += [f"• {query}" for query in research.queries]
        if research.findings:
            lines += ["", "Key findings:"]
            for finding in research.findings:
                lines += [f"**{finding.query}**:", finding.text, ""]
            lines.pop()

    if result.notes:
        lines += ["", "**Notes**:"]
        lines += [f"• {note}" for note in result.notes]

    return "\n".join(lines)
