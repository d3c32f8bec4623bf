"""Service construction.

Connectors are built once at process start from Settings and handed to the
orchestrator explicitly; nothing here is a module-level singleton.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .config import Settings, get_settings
from .connectors import CalendarConnector, GitHubConnector, NotionConnector, ResearchConnector
from .orchestrator import ContentWorkflowOrchestrator

logger = logging.getLogger("contentflow-core.services")


@dataclass
class Services:
    github: GitHubConnector
    notion: NotionConnector
    calendar: CalendarConnector
    research: ResearchConnector
    workflow: ContentWorkflowOrchestrator

    async def aclose(self) -> None:
        for connector in (self.github, self.notion, self.calendar, self.research):
            await connector.aclose()


def build_services(settings: Optional[Settings] = None) -> Services:
    """Construct every connector and the orchestrator.

    Raises:
        ConfigurationError: a connector's required configuration is missing or malformed
    """
    settings = settings or get_settings()
    timeout = settings.http_timeout

    # Validate every config before opening any HTTP client
    github_config = settings.github
    notion_config = settings.notion
    calendar_config = settings.google_calendar
    research_config = settings.research

    github = GitHubConnector(github_config, timeout=timeout)
    notion = NotionConnector(notion_config, timeout=timeout)
    calendar = CalendarConnector(calendar_config, timeout=timeout)
    research = ResearchConnector(research_config)

    logger.info(
        f"Services ready: GitHub {github_config.owner}/{github_config.repo}, "
        f"Notion database {notion_config.database_id}, research mode {research.mode.value}"
    )
    return Services(
        github=github,
        notion=notion,
        calendar=calendar,
        research=research,
        workflow=ContentWorkflowOrchestrator(github, notion, calendar, research),
    )
