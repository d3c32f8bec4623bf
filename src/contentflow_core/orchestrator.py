"""Workflow orchestrator: composite operations over the four connectors.

Each operation runs its steps strictly in sequence because later steps
consume identifiers produced by earlier ones (page URL → issue body,
branch → pull request → page status). Rules shared by all operations:

- A connector failure (any ContentFlowError, including AuthRequiredError from
  the calendar) is recorded as a failed step and the operation continues.
- A step whose prerequisite did not succeed is recorded as skipped with the
  reason, never attempted with missing inputs.
- Only "fetch page" in publish-content is a hard prerequisite for everything
  after it.
- Nothing is rolled back; partially completed workflows are reported as-is.
"""
import logging
import re
from datetime import timedelta
from typing import Awaitable, Callable, Optional, TypeVar

from .errors import BranchAlreadyExistsError, ContentFlowError
from .schemas import (
    ContentPlanRequest,
    PageStatus,
    PublishContentRequest,
    ResearchDepth,
    ResearchMode,
    ResearchTopicRequest,
    parse_arguments,
)
from .workflow import ResearchFinding, ResearchResult, WorkflowResult, WorkflowStepOutcome

logger = logging.getLogger("contentflow-core.orchestrator")

T = TypeVar("T")

# Tag attached to every page this orchestrator creates
AUTOMATED_TAG = "automated"

MILESTONE_OFFSET = timedelta(days=3)
EVENT_DURATION = timedelta(hours=1)

# Lines of each query's results kept in a research summary
FINDING_LINES = 5
RESULTS_PER_QUERY = 3

# Characters of page content quoted in a publish pull request
PR_EXCERPT_CHARS = 500

NO_RESEARCH_NOTE = "Research could not be completed: retry or refine research query."
DISABLED_RESEARCH_NOTE = "Web research is disabled; findings are placeholder text."


def research_queries(topic: str, depth: ResearchDepth) -> list[str]:
    """Queries issued for a topic, in order."""
    if depth == ResearchDepth.BASIC:
        return [topic]
    return [
        topic,
        f"{topic} overview",
        f"{topic} latest trends",
        f"{topic} best practices",
        f"{topic} examples",
    ]


def default_branch_name(content_id: str) -> str:
    """Deterministic branch name for a workspace page id."""
    slug = re.sub(r"[^a-z0-9._]+", "-", content_id.replace("-", "").lower()).strip("-.")
    return f"content/{slug or 'page'}"


def render_research(research: Optional[ResearchResult]) -> str:
    """Markdown summary of research findings, embedded in pages and issues."""
    if research is None or not research.has_findings:
        return "No research findings available."
    sections = [
        f"Research summary for \"{research.topic}\" (depth: {research.depth.value})",
        "Queries: " + ", ".join(research.queries),
    ]
    for finding in research.findings:
        sections.append(f"**{finding.query}**\n{finding.text}")
    return "\n\n".join(sections)


class ContentWorkflowOrchestrator:
    """Research → plan → track → schedule → publish.

    Connectors are injected; anything exposing the same coroutine methods
    (create_page, create_issue, search, ...) can stand in for them.
    """

    def __init__(self, github, notion, calendar, research):
        self.github = github
        self.notion = notion
        self.calendar = calendar
        self.research = research

    async def _attempt(
        self,
        result: WorkflowResult,
        step: str,
        operation: Callable[[], Awaitable[T]],
        describe: Callable[[T], tuple[str, Optional[str]]],
    ) -> Optional[T]:
        """Run one step, recording its outcome. Returns None when the step failed."""
        try:
            value = await operation()
        except ContentFlowError as e:
            logger.warning(f"{result.operation}: step '{step}' failed: {e}")
            result.record(WorkflowStepOutcome.failed(step, str(e)))
            return None
        detail, reference = describe(value)
        result.record(WorkflowStepOutcome.succeeded(step, detail, reference))
        return value

    async def _gather_research(
        self,
        result: WorkflowResult,
        topic: str,
        depth: ResearchDepth,
        record_queries: bool,
    ) -> tuple[ResearchResult, list[str]]:
        """Issue each query independently; returns the findings and the error texts.

        With `record_queries`, every query becomes its own workflow step.
        """
        queries = research_queries(topic, depth)
        findings = []
        errors = []
        for query in queries:
            step = f"search: {query}"
            try:
                search = await self.research.search({"query": query, "maxResults": RESULTS_PER_QUERY})
            except ContentFlowError as e:
                logger.warning(f"{result.operation}: search '{query}' failed: {e}")
                errors.append(f"{query}: {e}")
                if record_queries:
                    result.record(WorkflowStepOutcome.failed(step, str(e)))
                continue
            if search.mode == ResearchMode.DISABLED and DISABLED_RESEARCH_NOTE not in result.notes:
                result.notes.append(DISABLED_RESEARCH_NOTE)
            summary = "\n".join(search.summary_lines()).splitlines()
            findings.append(ResearchFinding(query, "\n".join(summary[:FINDING_LINES])))
            if record_queries:
                result.record(WorkflowStepOutcome.succeeded(step, f"{len(search.hits)} results"))
        research = ResearchResult(topic=topic, depth=depth, queries=tuple(queries), findings=tuple(findings))
        result.research = research
        return research, errors

    # ========================================================================
    # Create Content Plan
    # ========================================================================

    async def create_content_plan(self, arguments: Optional[dict] = None) -> WorkflowResult:
        """Research a topic, then plan, track and schedule it.

        Steps: research (basic) → planning page → tracking issue →
        milestone event → deadline event. Every step is best-effort.
        """
        request = parse_arguments(ContentPlanRequest, arguments)
        result = WorkflowResult("create_content_plan", f"Content plan: {request.topic}")
        logger.info(f"Creating content plan for '{request.topic}' ({request.content_type}, due {request.deadline.isoformat()})")

        # 1. Research
        research, errors = await self._gather_research(result, request.topic, ResearchDepth.BASIC, record_queries=False)
        if research.has_findings:
            result.record(WorkflowStepOutcome.succeeded(
                "research", f"{len(research.findings)} of {len(research.queries)} queries returned findings",
            ))
        else:
            result.record(WorkflowStepOutcome.failed("research", "; ".join(errors) or "no findings"))

        assignee = request.assignee or "Unassigned"
        deadline = request.deadline.isoformat()

        # 2. Planning page
        page_body = (
            f"Content plan for {request.topic}\n\n"
            f"Content type: {request.content_type}\n"
            f"Deadline: {deadline}\n"
            f"Assignee: {assignee}\n\n"
            f"{render_research(research)}"
        )
        page = await self._attempt(
            result, "planning page",
            lambda: self.notion.create_page({
                "title": f"Content Plan: {request.topic}",
                "content": page_body,
                "tags": [request.content_type, AUTOMATED_TAG],
            }),
            lambda p: (f"Page '{p.title}' ({p.id})", p.url),
        )

        # 3. Tracking issue
        page_line = f"Planning page: {page.url}" if page else "Planning page: not created (see workflow summary)"
        issue_body = (
            f"Create {request.content_type} content on **{request.topic}**.\n\n"
            f"- Deadline: {deadline}\n"
            f"- Assignee: {assignee}\n"
            f"- {page_line}\n"
        )
        issue = await self._attempt(
            result, "tracking issue",
            lambda: self.github.create_issue({
                "title": f"Create {request.content_type}: {request.topic}",
                "body": issue_body,
                "labels": [request.content_type],
            }),
            lambda i: (f"Issue #{i.number}: {i.title}", i.html_url),
        )

        # 4. Calendar events
        attendees = [request.assignee] if request.assignee and "@" in request.assignee else []
        links = "\n".join(line for line in [
            f"Plan: {page.url}" if page else "",
            f"Issue: {issue.html_url}" if issue else "",
        ] if line)
        milestone_start = request.deadline - MILESTONE_OFFSET
        for step, title, start in (
            ("milestone event", f"Milestone: {request.topic} draft review", milestone_start),
            ("deadline event", f"Deadline: {request.topic}", request.deadline),
        ):
            await self._attempt(
                result, step,
                lambda title=title, start=start: self.calendar.create_event({
                    "title": title,
                    "description": f"{request.content_type} on {request.topic}\n{links}".strip(),
                    "startTime": start.isoformat(),
                    "endTime": (start + EVENT_DURATION).isoformat(),
                    "attendees": attendees,
                }),
                lambda e: (f"{e.title} at {e.start}", e.html_link or f"event {e.id}"),
            )

        logger.info(f"Content plan for '{request.topic}' finished: {result.status.value}")
        return result

    # ========================================================================
    # Research Topic
    # ========================================================================

    async def research_topic(self, arguments: Optional[dict] = None) -> WorkflowResult:
        """Run the topic queries, then document the findings and open a tracking issue."""
        request = parse_arguments(ResearchTopicRequest, arguments)
        result = WorkflowResult("research_topic", f"Research: {request.topic}")
        logger.info(f"Researching '{request.topic}' (depth: {request.depth.value})")

        research, _ = await self._gather_research(result, request.topic, request.depth, record_queries=True)
        if not research.has_findings:
            result.notes.append(NO_RESEARCH_NOTE)

        summary = render_research(research)
        page = await self._attempt(
            result, "findings page",
            lambda: self.notion.create_page({
                "title": f"Research: {request.topic}",
                "content": summary,
                "tags": ["research", request.depth.value, AUTOMATED_TAG],
            }),
            lambda p: (f"Page '{p.title}' ({p.id})", p.url),
        )

        page_line = f"Findings page: {page.url}" if page else "Findings page: not created (see workflow summary)"
        queries = "\n".join(f"- {query}" for query in research.queries)
        await self._attempt(
            result, "tracking issue",
            lambda: self.github.create_issue({
                "title": f"Research: {request.topic}",
                "body": f"Research on **{request.topic}** ({request.depth.value}).\n\n{page_line}\n\nQueries:\n{queries}\n",
                "labels": ["research"],
            }),
            lambda i: (f"Issue #{i.number}: {i.title}", i.html_url),
        )

        logger.info(f"Research on '{request.topic}' finished: {result.status.value}")
        return result

    # ========================================================================
    # Publish Content
    # ========================================================================

    async def publish_content(self, arguments: Optional[dict] = None) -> WorkflowResult:
        """Fetch a page, branch, open a pull request and move the page to Review.

        Fetching the page is the only fatal step: without it nothing is published
        and the remaining steps are recorded as skipped.
        """
        request = parse_arguments(PublishContentRequest, arguments)
        result = WorkflowResult("publish_content", f"Publish content {request.content_id}")
        logger.info(f"Publishing page {request.content_id} to {request.repository}")

        page = await self._attempt(
            result, "fetch page",
            lambda: self.notion.get_page({"pageId": request.content_id}),
            lambda p: (f"Fetched '{p.title}' (status: {p.status})", p.url),
        )
        if page is None:
            for step in ("create branch", "open pull request", "update page status"):
                result.record(WorkflowStepOutcome.skipped(step, "page could not be fetched; nothing to publish"))
            logger.info(f"Publishing {request.content_id} aborted: page fetch failed")
            return result

        branch_name = request.branch or default_branch_name(request.content_id)
        branch_ready = False
        try:
            branch = await self.github.create_branch({"branchName": branch_name, "repository": request.repository})
        except BranchAlreadyExistsError:
            result.record(WorkflowStepOutcome.succeeded("create branch", f"Branch '{branch_name}' already exists; reusing it"))
            branch_ready = True
        except ContentFlowError as e:
            logger.warning(f"{result.operation}: step 'create branch' failed: {e}")
            result.record(WorkflowStepOutcome.failed("create branch", str(e)))
        else:
            result.record(WorkflowStepOutcome.succeeded(
                "create branch", f"Created branch '{branch.name}' from '{branch.base}'", branch.html_url,
            ))
            branch_ready = True

        pull_request = None
        if branch_ready:
            excerpt = page.content[:PR_EXCERPT_CHARS]
            if len(page.content) > PR_EXCERPT_CHARS:
                excerpt += "..."
            pr_body = (
                f"Publishes **{page.title}** from the content workspace.\n\n"
                f"- Source page: {page.url}\n"
                f"- Status: {page.status}\n"
                f"- Tags: {', '.join(page.tags) or 'None'}\n\n"
                f"Content excerpt:\n\n{excerpt or '(empty page)'}\n"
            )
            pull_request = await self._attempt(
                result, "open pull request",
                lambda: self.github.create_pull_request({
                    "title": f"Publish: {page.title}",
                    "body": pr_body,
                    "head": branch_name,
                    "repository": request.repository,
                }),
                lambda pr: (f"PR #{pr.number}: {pr.title} ({pr.head} -> {pr.base})", pr.html_url),
            )
        else:
            result.record(WorkflowStepOutcome.skipped(
                "open pull request", "branch step did not succeed; a pull request needs a head branch",
            ))

        if pull_request is not None:
            await self._attempt(
                result, "update page status",
                lambda: self.notion.update_page({"pageId": request.content_id, "status": PageStatus.REVIEW.value}),
                lambda p: (f"Page status set to {PageStatus.REVIEW.value}", p.url),
            )
        else:
            result.record(WorkflowStepOutcome.skipped("update page status", "no pull request to review"))

        logger.info(f"Publishing {request.content_id} finished: {result.status.value}")
        return result
