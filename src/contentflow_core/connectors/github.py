"""Source-host connector backed by the GitHub REST API."""
import logging
from typing import Optional

import httpx

from ..config import GitHubConfig
from ..errors import BranchAlreadyExistsError, RemoteCallError, ValidationError
from ..schemas import (
    Branch,
    CreateBranchInput,
    CreateIssueInput,
    CreatePullRequestInput,
    Issue,
    ListIssuesInput,
    PullRequest,
    Repository,
    RepositoryInfoInput,
    parse_arguments,
)
from .base import BaseConnector

GITHUB_API_URL = "https://api.github.com"

# Label applied to every issue opened through this connector
CONTENT_LABEL = "content"


class GitHubConnector(BaseConnector):
    """Issues, branches and pull requests on the configured repository."""

    logger = logging.getLogger("contentflow-core.github")

    def __init__(
        self,
        config: GitHubConfig,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.config = config
        super().__init__(client or httpx.AsyncClient(
            base_url=GITHUB_API_URL,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {config.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        ))

    @property
    def default_branch(self) -> str:
        return self.config.default_branch

    def resolve_repository(self, repository: Optional[str]) -> tuple[str, str]:
        """Map `repo` or `owner/repo` onto (owner, repo), defaulting to the configured repository."""
        if not repository:
            return self.config.owner, self.config.repo
        parts = repository.strip().strip("/").split("/")
        if len(parts) == 1 and parts[0]:
            return self.config.owner, parts[0]
        if len(parts) == 2 and all(parts):
            return parts[0], parts[1]
        raise ValidationError(f"Invalid arguments: repository: expected 'repo' or 'owner/repo', got '{repository}'")

    async def create_issue(self, arguments: Optional[dict] = None) -> Issue:
        args = parse_arguments(CreateIssueInput, arguments)
        owner, repo = self.resolve_repository(args.repository)
        labels = [CONTENT_LABEL] + [label for label in args.labels if label != CONTENT_LABEL]

        response = await self._request(
            "POST", f"/repos/{owner}/{repo}/issues", "create GitHub issue",
            json={"title": args.title, "body": args.body, "labels": labels},
        )
        data = response.json()
        self.logger.info(f"Created issue #{data['number']} in {owner}/{repo}")
        return _issue_from_api(data)

    async def create_branch(self, arguments: Optional[dict] = None) -> Branch:
        """Create a branch from the head of the base branch.

        Raises:
            BranchAlreadyExistsError: the ref already exists on the host
        """
        args = parse_arguments(CreateBranchInput, arguments)
        owner, repo = self.resolve_repository(args.repository)
        base = args.base_branch or self.default_branch

        ref = await self._request("GET", f"/repos/{owner}/{repo}/git/ref/heads/{base}", "read GitHub base branch")
        sha = ref.json()["object"]["sha"]

        try:
            await self._request(
                "POST", f"/repos/{owner}/{repo}/git/refs", "create GitHub branch",
                json={"ref": f"refs/heads/{args.branch_name}", "sha": sha},
            )
        except RemoteCallError as e:
            if e.status_code == 422 and "already exists" in str(e).lower():
                raise BranchAlreadyExistsError(args.branch_name) from e
            raise

        self.logger.info(f"Created branch {args.branch_name} from {base} in {owner}/{repo}")
        return Branch(
            name=args.branch_name,
            base=base,
            sha=sha,
            html_url=f"https://github.com/{owner}/{repo}/tree/{args.branch_name}",
        )

    async def create_pull_request(self, arguments: Optional[dict] = None) -> PullRequest:
        args = parse_arguments(CreatePullRequestInput, arguments)
        owner, repo = self.resolve_repository(args.repository)
        base = args.base or self.default_branch

        response = await self._request(
            "POST", f"/repos/{owner}/{repo}/pulls", "create GitHub pull request",
            json={"title": args.title, "body": args.body, "head": args.head, "base": base},
        )
        data = response.json()
        self.logger.info(f"Opened PR #{data['number']} {args.head} -> {base} in {owner}/{repo}")
        return PullRequest(
            number=data["number"],
            title=data["title"],
            state=data["state"],
            html_url=data["html_url"],
            head=args.head,
            base=base,
        )

    async def list_issues(self, arguments: Optional[dict] = None) -> list[Issue]:
        args = parse_arguments(ListIssuesInput, arguments)
        owner, repo = self.resolve_repository(args.repository)
        params = {"state": args.state.value, "per_page": args.limit}
        if args.labels:
            params["labels"] = args.labels

        response = await self._request("GET", f"/repos/{owner}/{repo}/issues", "list GitHub issues", params=params)
        # The issues endpoint also returns pull requests
        issues = [_issue_from_api(item) for item in response.json() if "pull_request" not in item]
        self.logger.info(f"Listed {len(issues)} issues in {owner}/{repo}")
        return issues

    async def get_repository_info(self, arguments: Optional[dict] = None) -> Repository:
        args = parse_arguments(RepositoryInfoInput, arguments)
        owner, repo = self.resolve_repository(args.repository)

        response = await self._request("GET", f"/repos/{owner}/{repo}", "get repository info")
        return Repository.model_validate(response.json())


def _issue_from_api(data: dict) -> Issue:
    return Issue(
        number=data["number"],
        title=data["title"],
        state=data["state"],
        html_url=data["html_url"],
        labels=[label if isinstance(label, str) else label.get("name", "") for label in data.get("labels", [])],
        created_at=data.get("created_at"),
    )
