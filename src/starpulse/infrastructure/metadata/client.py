"""Repository-metadata source (details, issues, pulls, discussions)."""

from __future__ import annotations

from urllib.parse import quote

from starpulse.domain.entities.dispatch import DispatchItem, DispatchResult
from starpulse.domain.entities.errors import UpstreamError
from starpulse.domain.entities.ranking import RepositoryMetadata


class MetadataServiceSource:
    """Builds metadata requests and interprets their dispatched outcome.

    Implements ``MetadataSourcePort``.
    """

    def __init__(self, *, url_template: str) -> None:
        self._url_template = url_template

    def url_for(self, repo_id: str) -> str:
        return self._url_template.format(repo=quote(repo_id, safe="/"))

    def request_for(self, repo_id: str) -> DispatchItem:
        return DispatchItem(
            url=self.url_for(repo_id),
            method="GET",
            headers={"Accept": "application/json"},
        )

    def interpret(self, repo_id: str, result: DispatchResult) -> RepositoryMetadata:
        if result.error is not None:
            raise UpstreamError(result.error)
        if not 200 <= result.status < 300:
            raise UpstreamError(
                f"Failed to fetch repository info for {repo_id}: HTTP {result.status}"
            )
        if not isinstance(result.result, dict):
            raise UpstreamError(
                f"Unexpected metadata payload for {repo_id}: "
                f"{type(result.result).__name__}"
            )
        return result.result
