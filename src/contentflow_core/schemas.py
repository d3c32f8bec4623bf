"""Pydantic schemas for tool input validation and vendor records.

Every tool operation has a closed input model; `parse_arguments` is the single
validation entry point and turns pydantic errors into our ValidationError.
Field aliases match the camelCase names used in the tool catalog.
"""
import enum
from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)

from .errors import ValidationError


# ============================================================================
# Enums
# ============================================================================

class IssueState(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"


class PageStatus(str, enum.Enum):
    """Status select values of the content database."""
    DRAFT = "Draft"
    REVIEW = "Review"
    PUBLISHED = "Published"


class ResearchDepth(str, enum.Enum):
    BASIC = "basic"
    COMPREHENSIVE = "comprehensive"


class ResearchMode(str, enum.Enum):
    """Research connector mode, selected once from configuration."""
    LIVE = "live"
    DISABLED = "disabled"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC and normalize aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class ToolInput(BaseModel):
    """Base for all tool inputs: accept field names or their camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


# ============================================================================
# Source host (GitHub) inputs
# ============================================================================

class CreateIssueInput(ToolInput):
    title: str = Field(..., min_length=1, max_length=256)
    body: str
    labels: list[str] = Field(default_factory=list)
    repository: Optional[str] = None


class CreateBranchInput(ToolInput):
    branch_name: str = Field(..., min_length=1, alias="branchName")
    base_branch: Optional[str] = Field(None, alias="baseBranch")
    repository: Optional[str] = None

    @field_validator("branch_name")
    @classmethod
    def branch_name_is_ref_safe(cls, value: str) -> str:
        if " " in value or ".." in value or value.startswith("/") or value.endswith("/"):
            raise ValueError("not a valid git branch name")
        return value


class CreatePullRequestInput(ToolInput):
    title: str = Field(..., min_length=1)
    body: str
    head: str = Field(..., min_length=1)
    base: Optional[str] = None
    repository: Optional[str] = None


class ListIssuesInput(ToolInput):
    state: IssueState = IssueState.OPEN
    labels: Optional[str] = None
    limit: int = Field(10, ge=1, le=100)
    repository: Optional[str] = None


class RepositoryInfoInput(ToolInput):
    repository: Optional[str] = None


# ============================================================================
# Document workspace (Notion) inputs
# ============================================================================

def _normalize_page_status(value):
    if isinstance(value, str):
        return value.strip().capitalize()
    return value


PageStatusValue = Annotated[PageStatus, BeforeValidator(_normalize_page_status)]


class CreatePageInput(ToolInput):
    title: str = Field(..., min_length=1)
    content: str
    tags: list[str] = Field(default_factory=list)


class SearchPagesInput(ToolInput):
    query: str
    filter: Optional[str] = None


class UpdatePageInput(ToolInput):
    page_id: str = Field(..., min_length=1, alias="pageId")
    title: Optional[str] = None
    content: Optional[str] = None
    status: Optional[PageStatusValue] = None


class GetPageInput(ToolInput):
    page_id: str = Field(..., min_length=1, alias="pageId")


class ListDatabasePagesInput(ToolInput):
    status: Optional[PageStatusValue] = None
    limit: int = Field(10, ge=1, le=100)


# ============================================================================
# Calendar inputs
# ============================================================================

class CreateEventInput(ToolInput):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    start_time: UtcDatetime = Field(..., alias="startTime")
    end_time: UtcDatetime = Field(..., alias="endTime")
    attendees: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def end_after_start(self) -> "CreateEventInput":
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self


class ListEventsInput(ToolInput):
    time_min: Optional[UtcDatetime] = Field(None, alias="timeMin")
    time_max: Optional[UtcDatetime] = Field(None, alias="timeMax")
    max_results: int = Field(10, ge=1, le=250, alias="maxResults")


class UpdateEventInput(ToolInput):
    event_id: str = Field(..., min_length=1, alias="eventId")
    title: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[UtcDatetime] = Field(None, alias="startTime")
    end_time: Optional[UtcDatetime] = Field(None, alias="endTime")


class DeleteEventInput(ToolInput):
    event_id: str = Field(..., min_length=1, alias="eventId")


# ============================================================================
# Research inputs
# ============================================================================

class SearchInput(ToolInput):
    query: str = Field(..., min_length=1)
    max_results: int = Field(5, ge=1, le=20, alias="maxResults")


class ExtractContentInput(ToolInput):
    url: HttpUrl


# ============================================================================
# Workflow inputs
# ============================================================================

class ContentPlanRequest(ToolInput):
    """Input to the create-content-plan workflow."""

    topic: str = Field(..., min_length=1)
    content_type: str = Field(..., min_length=1, alias="contentType")
    deadline: UtcDatetime
    assignee: Optional[str] = None


class ResearchTopicRequest(ToolInput):
    topic: str = Field(..., min_length=1)
    depth: ResearchDepth = ResearchDepth.COMPREHENSIVE


class PublishContentRequest(ToolInput):
    content_id: str = Field(..., min_length=1, alias="contentId")
    repository: str = Field(..., min_length=1)
    branch: Optional[str] = None


def parse_arguments(model: type[ToolInput], arguments: Optional[dict]) -> ToolInput:
    """Validate a loosely-typed argument bag into the operation's input model.

    Raises:
        ValidationError: with one `field: reason` entry per problem
    """
    if arguments is not None and not isinstance(arguments, dict):
        raise ValidationError(f"Arguments must be an object, got {type(arguments).__name__}")
    try:
        return model.model_validate(arguments or {})
    except PydanticValidationError as e:
        problems = []
        for err in e.errors():
            field = ".".join(str(part) for part in err["loc"]) or "arguments"
            problems.append({"field": field, "message": err["msg"]})
        detail = "; ".join(f"{p['field']}: {p['message']}" for p in problems)
        raise ValidationError(f"Invalid arguments: {detail}", problems) from e


# ============================================================================
# Vendor records returned by connectors
# ============================================================================

class Issue(BaseModel):
    number: int
    title: str
    state: str
    html_url: str
    labels: list[str] = Field(default_factory=list)
    created_at: Optional[str] = None


class Branch(BaseModel):
    name: str
    base: str
    sha: str
    html_url: str


class PullRequest(BaseModel):
    number: int
    title: str
    state: str
    html_url: str
    head: str
    base: str


class Repository(BaseModel):
    full_name: str
    description: Optional[str] = None
    stargazers_count: int = 0
    forks_count: int = 0
    language: Optional[str] = None
    html_url: str
    default_branch: Optional[str] = None


class Page(BaseModel):
    id: str
    title: str = "Untitled"
    status: str = "Unknown"
    tags: list[str] = Field(default_factory=list)
    url: str
    content: str = ""
    created_date: Optional[str] = None
    last_edited: Optional[str] = None


class CalendarEvent(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    attendees: list[str] = Field(default_factory=list)
    html_link: Optional[str] = None


class SearchHit(BaseModel):
    title: str
    url: str = ""
    snippet: str = ""
    type: str = "search_result"


class SearchResults(BaseModel):
    query: str
    mode: ResearchMode
    hits: list[SearchHit] = Field(default_factory=list)

    def summary_lines(self) -> list[str]:
        """Plain-text lines describing the hits, one hit per line."""
        if not self.hits:
            return [f"No results found for '{self.query}'."]
        lines = []
        for index, hit in enumerate(self.hits, start=1):
            source = f" ({hit.url})" if hit.url else ""
            lines.append(f"{index}. {hit.title}{source}: {hit.snippet}")
        return lines


class ExtractedContent(BaseModel):
    url: str
    mode: ResearchMode
    title: str
    description: str
    content: str

    @property
    def word_count(self) -> int:
        return len(self.content.split())
