"""Incremental decoder for the remote dispatcher's event stream.

Wire format (server-sent events)::

    event: update
    data: {"completed": 3, "succeeded": 2, "failed": 1, "total": 10}

    event: result
    data: {"array": [{"status": 200, "headers": {}, "result": ...}, ...]}

The final payload may be split over several ``data:`` lines and several
network chunks; it is buffered and re-parsed on every new line until it
decodes.
"""

from __future__ import annotations

import enum
import json
from typing import Any

import structlog

from starpulse.domain.entities.dispatch import DispatchEvent, DispatchResult
from starpulse.domain.entities.errors import DispatchError

log = structlog.get_logger(__name__)


class ParserState(enum.Enum):
    AWAITING_EVENT = "awaiting_event"
    BUFFERING_PROGRESS = "buffering_progress"
    BUFFERING_RESULT = "buffering_result"
    DONE = "done"


def _progress_from(raw: str) -> DispatchEvent:
    try:
        data: Any = json.loads(raw)
    except ValueError:
        data = None
    if not isinstance(data, dict):
        return DispatchEvent(kind="progress")
    return DispatchEvent(
        kind="progress",
        completed=int(data.get("completed", 0) or 0),
        succeeded=int(data.get("succeeded", 0) or 0),
        failed=int(data.get("failed", 0) or 0),
        total=int(data.get("total", 0) or 0),
    )


class EventStreamParser:
    """State machine: ``awaiting_event -> buffering_progress | buffering_result``.

    Terminal once the final payload parses. Feed text chunks in arrival
    order; each call returns the events completed by that chunk.
    """

    def __init__(self) -> None:
        self.state = ParserState.AWAITING_EVENT
        self._line_buffer = ""
        self._result_buffer = ""
        self.final: DispatchEvent | None = None

    @property
    def done(self) -> bool:
        return self.state is ParserState.DONE

    def feed(self, chunk: str) -> list[DispatchEvent]:
        if self.done:
            return []

        self._line_buffer += chunk
        *lines, self._line_buffer = self._line_buffer.split("\n")

        events: list[DispatchEvent] = []
        for line in lines:
            event = self._on_line(line.rstrip("\r"))
            if event is not None:
                events.append(event)
            if self.done:
                break
        return events

    def close(self) -> DispatchEvent:
        """Flush the trailing partial line; raise if no result was seen."""
        if not self.done and self._line_buffer:
            pending, self._line_buffer = self._line_buffer, ""
            self._on_line(pending.rstrip("\r"))
        if self.final is None:
            raise DispatchError("Stream ended without complete result")
        return self.final

    def _on_line(self, line: str) -> DispatchEvent | None:
        if line.startswith("event:"):
            name = line[len("event:"):].strip()
            if name == "result":
                self.state = ParserState.BUFFERING_RESULT
                self._result_buffer = ""
            elif name == "update":
                self.state = ParserState.BUFFERING_PROGRESS
            else:
                self.state = ParserState.AWAITING_EVENT
            return None

        if not line.startswith("data:"):
            return None
        data = line[len("data:"):]
        if data.startswith(" "):
            data = data[1:]

        if self.state is ParserState.BUFFERING_PROGRESS:
            self.state = ParserState.AWAITING_EVENT
            return _progress_from(data)

        if self.state is ParserState.BUFFERING_RESULT:
            self._result_buffer += data
            return self._try_finish()

        return None

    def _try_finish(self) -> DispatchEvent | None:
        try:
            payload = json.loads(self._result_buffer)
        except ValueError:
            # incomplete, keep buffering
            return None

        array = payload.get("array") if isinstance(payload, dict) else None
        if not isinstance(array, list):
            raise DispatchError("Final dispatch payload has no 'array' field")

        results = tuple(
            DispatchResult.from_dict(entry)
            if isinstance(entry, dict)
            else DispatchResult.failure("malformed result entry")
            for entry in array
        )
        succeeded = sum(1 for r in results if r.ok)
        self.final = DispatchEvent(
            kind="result",
            completed=len(results),
            succeeded=succeeded,
            failed=len(results) - succeeded,
            total=len(results),
            results=results,
        )
        self.state = ParserState.DONE
        log.debug("dispatch_stream_result", total=len(results))
        return self.final
