"""Document-workspace connector backed by the Notion API.

The content database is expected to have these properties:
- Title (title)
- Status (select: Draft, Review, Published)
- Tags (multi-select)
- Created Date (date)
"""
import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from ..config import NotionConfig
from ..schemas import (
    CreatePageInput,
    GetPageInput,
    ListDatabasePagesInput,
    Page,
    PageStatus,
    SearchPagesInput,
    UpdatePageInput,
    parse_arguments,
)
from .base import BaseConnector

NOTION_API_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"

# Notion caps a single rich-text object at 2000 characters
RICH_TEXT_LIMIT = 2000

TEXT_BLOCK_TYPES = ("paragraph", "heading_1", "heading_2", "heading_3", "bulleted_list_item", "numbered_list_item", "quote")


def page_url(page_id: str) -> str:
    return f"https://notion.so/{page_id.replace('-', '')}"


def paragraph_blocks(content: str) -> list[dict]:
    """Split content into paragraph blocks that respect the rich-text size cap."""
    chunks = [content[i:i + RICH_TEXT_LIMIT] for i in range(0, len(content), RICH_TEXT_LIMIT)] or [""]
    return [
        {
            "object": "block",
            "type": "paragraph",
            "paragraph": {"rich_text": [{"type": "text", "text": {"content": chunk}}]},
        }
        for chunk in chunks
    ]


def _title_property(title: str) -> dict:
    return {"title": [{"text": {"content": title}}]}


def page_from_api(data: dict, content: str = "") -> Page:
    """Build a Page record from a Notion page object."""
    properties = data.get("properties") or {}
    title_items = (properties.get("Title") or {}).get("title") or []
    title = "".join(item.get("plain_text") or item.get("text", {}).get("content", "") for item in title_items)
    status = ((properties.get("Status") or {}).get("select") or {}).get("name")
    tags = [tag["name"] for tag in (properties.get("Tags") or {}).get("multi_select") or []]
    created = ((properties.get("Created Date") or {}).get("date") or {}).get("start")
    return Page(
        id=data["id"],
        title=title or "Untitled",
        status=status or "Unknown",
        tags=tags,
        url=data.get("url") or page_url(data["id"]),
        content=content,
        created_date=created,
        last_edited=data.get("last_edited_time"),
    )


def block_text(block: dict) -> str:
    block_type = block.get("type")
    if block_type not in TEXT_BLOCK_TYPES:
        return ""
    rich_text = (block.get(block_type) or {}).get("rich_text") or []
    return "".join(item.get("plain_text") or item.get("text", {}).get("content", "") for item in rich_text)


class NotionConnector(BaseConnector):
    """Page CRUD and search inside the configured content database."""

    logger = logging.getLogger("contentflow-core.notion")

    def __init__(
        self,
        config: NotionConfig,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.config = config
        super().__init__(client or httpx.AsyncClient(
            base_url=NOTION_API_URL,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {config.token}",
                "Notion-Version": NOTION_VERSION,
                "Content-Type": "application/json",
            },
        ))

    def _in_database(self, page: dict) -> bool:
        parent_id = (page.get("parent") or {}).get("database_id") or ""
        return parent_id.replace("-", "") == self.config.database_id.replace("-", "")

    async def create_page(self, arguments: Optional[dict] = None) -> Page:
        args = parse_arguments(CreatePageInput, arguments)
        payload = {
            "parent": {"database_id": self.config.database_id},
            "properties": {
                "Title": _title_property(args.title),
                "Status": {"select": {"name": PageStatus.DRAFT.value}},
                "Tags": {"multi_select": [{"name": tag} for tag in args.tags]},
                "Created Date": {"date": {"start": datetime.now(timezone.utc).isoformat()}},
            },
            "children": paragraph_blocks(args.content),
        }

        response = await self._request("POST", "/pages", "create Notion page", json=payload)
        page = page_from_api(response.json(), content=args.content)
        self.logger.info(f"Created Notion page {page.id}: {page.title}")
        return page

    async def search_pages(self, arguments: Optional[dict] = None) -> list[Page]:
        args = parse_arguments(SearchPagesInput, arguments)
        payload = {
            "query": args.query,
            "filter": {"property": "object", "value": "page"},
            "sort": {"direction": "descending", "timestamp": "last_edited_time"},
        }

        response = await self._request("POST", "/search", "search Notion pages", json=payload)
        pages = [page_from_api(item) for item in response.json().get("results", []) if self._in_database(item)]
        if args.filter:
            needle = args.filter.lower()
            pages = [
                page for page in pages
                if page.status.lower() == needle or needle in (tag.lower() for tag in page.tags)
            ]
        self.logger.info(f"Notion search '{args.query}' matched {len(pages)} pages")
        return pages

    async def update_page(self, arguments: Optional[dict] = None) -> Page:
        """Patch title/status properties and optionally append a paragraph."""
        args = parse_arguments(UpdatePageInput, arguments)
        properties = {}
        if args.title:
            properties["Title"] = _title_property(args.title)
        if args.status:
            properties["Status"] = {"select": {"name": args.status.value}}

        response = await self._request(
            "PATCH", f"/pages/{args.page_id}", "update Notion page", json={"properties": properties},
        )
        if args.content:
            await self._request(
                "PATCH", f"/blocks/{args.page_id}/children", "append Notion page content",
                json={"children": paragraph_blocks(args.content)},
            )
        self.logger.info(f"Updated Notion page {args.page_id} (fields: {sorted(properties) + (['content'] if args.content else [])})")
        return page_from_api(response.json(), content=args.content or "")

    async def get_page(self, arguments: Optional[dict] = None) -> Page:
        args = parse_arguments(GetPageInput, arguments)

        page = await self._request("GET", f"/pages/{args.page_id}", "get Notion page")
        blocks = await self._request(
            "GET", f"/blocks/{args.page_id}/children", "get Notion page content", params={"page_size": 100},
        )
        lines = [block_text(block) for block in blocks.json().get("results", [])]
        content = "\n".join(line for line in lines if line)
        return page_from_api(page.json(), content=content)

    async def list_database_pages(self, arguments: Optional[dict] = None) -> list[Page]:
        args = parse_arguments(ListDatabasePagesInput, arguments)
        payload = {
            "page_size": args.limit,
            "sorts": [{"property": "Created Date", "direction": "descending"}],
        }
        if args.status:
            payload["filter"] = {"property": "Status", "select": {"equals": args.status.value}}

        response = await self._request(
            "POST", f"/databases/{self.config.database_id}/query", "list database pages", json=payload,
        )
        return [page_from_api(item) for item in response.json().get("results", [])]
