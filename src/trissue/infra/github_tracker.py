from __future__ import annotations

from typing import Any, Iterator, Optional, Sequence
from urllib.parse import quote

import requests

from ..core.domain.exceptions import TrackerError
from ..core.domain.models import TrackingIssue


GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
DEFAULT_LABEL_COLOR = "ededed"

_ADD_TO_PROJECT_MUTATION = """
mutation($projectId: ID!, $contentId: ID!) {
  addProjectV2ItemById(input: {projectId: $projectId, contentId: $contentId}) {
    item { id }
  }
}
"""


def _graphql_url(api_url: str) -> str:
    # GitHub Enterprise serves REST at /api/v3 and GraphQL at /api/graphql
    base = api_url.rstrip("/")
    if base.endswith("/api/v3"):
        return base[: -len("/v3")] + "/graphql"
    return base + "/graphql"


class GitHubTracker:
    """Tracker gateway backed by the GitHub REST API.

    Every failure surfaces as TrackerError chained to the requests exception.
    No retries are attempted.
    """

    def __init__(
        self,
        *,
        token: str | None,
        repository: str | None,
        api_url: str = GITHUB_API_URL,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self._repository = repository
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            }
        )
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    @property
    def _repo_path(self) -> str:
        if not self._repository:
            raise TrackerError("configuration", "no repository configured (expected owner/name)")
        return f"/repos/{self._repository}"

    def list_issues(self, labels: Sequence[str]) -> list[TrackingIssue]:
        """List open and closed issues carrying all ``labels``.

        Pull requests returned by the issues endpoint are skipped. Only the
        first page (100 items) is read.
        """
        params: dict[str, Any] = {"state": "all", "per_page": 100}
        wanted = [label for label in labels if label]
        if wanted:
            params["labels"] = ",".join(wanted)

        response = self._request("list_issues", "GET", f"{self._repo_path}/issues", params=params)
        return [self._to_issue(item) for item in self._json(response, "list_issues") if "pull_request" not in item]

    def create_issue(
        self,
        *,
        title: str,
        body: str,
        labels: Sequence[str],
        assignees: Optional[Sequence[str]] = None,
        project_id: Optional[str] = None,
        fix_label: Optional[str] = None,
    ) -> TrackingIssue:
        issue_labels = [label for label in labels if label]
        if fix_label and fix_label not in issue_labels:
            issue_labels.append(fix_label)

        payload: dict[str, Any] = {"title": title, "body": body, "labels": issue_labels}
        wanted_assignees = [a for a in (assignees or []) if a]
        if wanted_assignees:
            payload["assignees"] = wanted_assignees

        response = self._request("create_issue", "POST", f"{self._repo_path}/issues", json=payload)
        data = self._json(response, "create_issue")
        issue = self._to_issue(data)
        if project_id:
            try:
                self._add_to_project(project_id, data.get("node_id"))
            except TrackerError as e:
                e.created = issue
                raise
        return issue

    def reopen_issue(self, number: int) -> TrackingIssue:
        return self._set_state("reopen_issue", number, {"state": "open"})

    def close_issue(self, number: int) -> TrackingIssue:
        return self._set_state("close_issue", number, {"state": "closed", "state_reason": "completed"})

    def create_label_if_missing(self, label: str) -> None:
        path = f"{self._repo_path}/labels"
        response = self._request(
            "create_label",
            "GET",
            f"{path}/{quote(label, safe='')}",
            allowed_statuses=(404,),
        )
        if response.status_code != 404:
            return
        self._request(
            "create_label",
            "POST",
            path,
            json={"name": label, "color": DEFAULT_LABEL_COLOR},
        )

    def close(self) -> None:
        self._session.close()

    def _set_state(self, operation: str, number: int, payload: dict[str, Any]) -> TrackingIssue:
        response = self._request(operation, "PATCH", f"{self._repo_path}/issues/{number}", json=payload)
        return self._to_issue(self._json(response, operation))

    def _add_to_project(self, project_id: str, content_id: Optional[str]) -> None:
        if not content_id:
            raise TrackerError("add_to_project", "created issue has no node_id")
        response = self._request(
            "add_to_project",
            "POST",
            _graphql_url(self._api_url),
            absolute=True,
            json={
                "query": _ADD_TO_PROJECT_MUTATION,
                "variables": {"projectId": project_id, "contentId": content_id},
            },
        )
        errors = self._json(response, "add_to_project").get("errors")
        if errors:
            first = errors[0]
            message = first.get("message") if isinstance(first, dict) else str(first)
            raise TrackerError("add_to_project", str(message))

    def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        absolute: bool = False,
        allowed_statuses: tuple[int, ...] = (),
        **kwargs: Any,
    ) -> requests.Response:
        url = path if absolute else f"{self._api_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
            if response.status_code not in allowed_statuses:
                response.raise_for_status()
        except requests.RequestException as e:
            raise TrackerError(operation, str(e)) from e
        return response

    @staticmethod
    def _json(response: requests.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TrackerError(operation, f"response is not JSON: {e}") from e

    @staticmethod
    def _to_issue(item: dict[str, Any]) -> TrackingIssue:
        labels = frozenset(
            str(label.get("name", "")) if isinstance(label, dict) else str(label)
            for label in item.get("labels") or []
        )
        return TrackingIssue(
            number=int(item["number"]),
            title=str(item.get("title") or ""),
            state="closed" if item.get("state") == "closed" else "open",
            labels=labels,
            url=item.get("html_url"),
        )


def init_github_tracker(
    *,
    token: str | None,
    repository: str | None,
    api_url: str = GITHUB_API_URL,
    timeout: float = 30.0,
) -> Iterator[GitHubTracker]:
    """Resource initializer: yields a tracker and closes its session on shutdown."""
    tracker = GitHubTracker(token=token, repository=repository, api_url=api_url, timeout=timeout)
    try:
        yield tracker
    finally:
        tracker.close()
