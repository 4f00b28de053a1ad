from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import requests

from . import __version__

DEFAULT_API_URL = "https://api.github.com"
USER_AGENT = f"issuesync/{__version__}"
HTTP_ERROR_STATUS = 400
MAX_PAGE_SIZE = 100
REQUEST_TIMEOUT = 30


class GitHubAPIError(RuntimeError):
    """Raised when the GitHub REST API returns an error or cannot be reached."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.response_text = response_text


@dataclass
class GitHubRestClient:
    """Minimal REST client for the issue endpoints of a single repository.

    Failed calls raise :class:`GitHubAPIError` straight away; there is no
    retry layer; the next poll tick or file event is the retry.
    """

    token: str
    repo: str  # owner/name
    base_url: str = DEFAULT_API_URL
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        self._session.headers.setdefault("Authorization", f"Bearer {self.token}")
        self._session.headers.setdefault("Accept", "application/vnd.github+json")
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    def close(self) -> None:
        """Release pooled connections of a session this client created."""
        if self.session is None:
            self._session.close()

    # ---- REST helpers -------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Any:
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self._session.headers,
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as exc:
            raise GitHubAPIError(f"GitHub API {method} {url} failed: {exc}") from exc
        if response.status_code >= HTTP_ERROR_STATUS:
            raise GitHubAPIError(
                f"GitHub API {method} {url} failed with {response.status_code}",
                status=response.status_code,
                response_text=response.text,
            )
        if response.text:
            try:
                return response.json()
            except ValueError as exc:
                raise GitHubAPIError(
                    f"GitHub API {method} {url} returned invalid JSON",
                    status=response.status_code,
                    response_text=response.text,
                ) from exc
        return None

    def _paginate(self, path: str, *, params: dict[str, Any] | None = None) -> list[Any]:
        params = dict(params or {})
        per_page = min(int(params.setdefault("per_page", MAX_PAGE_SIZE)), MAX_PAGE_SIZE)
        params["per_page"] = per_page
        params.setdefault("page", 1)
        results: list[Any] = []
        while True:
            data = self._request("GET", path, params=dict(params))
            if not isinstance(data, list):
                break
            results.extend(data)
            if len(data) < per_page:
                break
            params["page"] += 1
        return results

    # ---- Issue operations --------------------------------------------
    def list_issues(
        self, *, state: str = "all", per_page: int = MAX_PAGE_SIZE
    ) -> list[dict[str, Any]]:
        """Every issue in the repository, newest-created first.

        The issues endpoint also returns pull requests; those are dropped.
        """
        params = {
            "state": state,
            "sort": "created",
            "direction": "desc",
            "per_page": per_page,
            "page": 1,
        }
        data = self._paginate(f"/repos/{self.repo}/issues", params=params)
        out: list[dict[str, Any]] = []
        for entry in data:
            if isinstance(entry, dict) and "pull_request" not in entry:
                out.append(entry)
        return out

    def update_issue(
        self,
        *,
        number: int,
        body: str,
        title: str | None = None,
        state: str | None = None,
        labels: Iterable[str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"body": body}
        if title is not None:
            payload["title"] = title
        if state is not None:
            payload["state"] = state
        if labels is not None:
            payload["labels"] = list(labels)
        self._request("PATCH", f"/repos/{self.repo}/issues/{number}", json_body=payload)


__all__ = ["GitHubAPIError", "GitHubRestClient", "DEFAULT_API_URL", "MAX_PAGE_SIZE"]
