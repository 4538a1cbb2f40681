"""Domain entities for fan-out dispatch of outbound HTTP requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
DispatchEventKind = Literal["progress", "result"]


@dataclass(frozen=True)
class DispatchItem:
    """Descriptor of one outbound request."""

    url: str
    method: HttpMethod = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"url": self.url, "method": self.method}
        if self.headers:
            data["headers"] = dict(self.headers)
        if self.body is not None:
            data["body"] = self.body
        return data


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of one DispatchItem, matched to its input by position."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    result: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.status < 300

    @classmethod
    def failure(cls, error: str, *, status: int = 0) -> DispatchResult:
        return cls(status=status, error=error)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DispatchResult:
        raw_headers = data.get("headers") or {}
        return cls(
            status=int(data.get("status") or 0),
            headers={str(k): str(v) for k, v in dict(raw_headers).items()},
            result=data.get("result"),
            error=data.get("error"),
        )


@dataclass(frozen=True)
class DispatchEvent:
    """Incremental event emitted while a batch executes.

    ``progress`` events carry running counters; the single ``result`` event
    carries the complete, input-ordered result list.
    """

    kind: DispatchEventKind
    completed: int = 0
    succeeded: int = 0
    failed: int = 0
    total: int = 0
    results: tuple[DispatchResult, ...] = ()
