"""Port for the repository-metadata service."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from starpulse.domain.entities.dispatch import DispatchItem, DispatchResult
from starpulse.domain.entities.ranking import RepositoryMetadata


@runtime_checkable
class MetadataSourcePort(Protocol):
    """Describes how to fetch and interpret metadata for one repository.

    Requests are executed by a fan-out dispatcher, so the source only
    builds the request and interprets the outcome.
    """

    def request_for(self, repo_id: str) -> DispatchItem: ...

    def interpret(self, repo_id: str, result: DispatchResult) -> RepositoryMetadata:
        """Return metadata, or raise UpstreamError with a readable message."""
        ...
