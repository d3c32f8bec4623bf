"""Validated vendor connectors."""
from .calendar import CalendarConnector
from .github import GitHubConnector
from .notion import NotionConnector
from .research import ResearchConnector

__all__ = ["CalendarConnector", "GitHubConnector", "NotionConnector", "ResearchConnector"]
