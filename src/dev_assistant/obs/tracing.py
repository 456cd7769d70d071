"""Per-message dispatch tracing and aggregate metrics."""

from __future__ import annotations

import time
import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone

from dev_assistant.types import CapabilityTrace


@dataclass(slots=True)
class DispatchRecord:
    trace_id: str
    timestamp_utc: str
    text: str
    intent: str
    flagged: bool
    attachment_count: int
    capability_traces: list[CapabilityTrace]
    reply_preview: str
    latency_ms: float


class TraceStore:
    """In-memory trace storage for API-level observability."""

    def __init__(self, *, max_records: int = 1000) -> None:
        self._records: dict[str, DispatchRecord] = {}
        self._max_records = max_records

    def create_record(
        self,
        *,
        text: str,
        intent: str,
        flagged: bool,
        attachment_count: int,
        capability_traces: list[CapabilityTrace],
        reply_preview: str,
        latency_ms: float,
    ) -> DispatchRecord:
        trace_id = str(uuid.uuid4())
        record = DispatchRecord(
            trace_id=trace_id,
            timestamp_utc=datetime.now(timezone.utc).isoformat(),
            text=text,
            intent=intent,
            flagged=flagged,
            attachment_count=attachment_count,
            capability_traces=capability_traces,
            reply_preview=reply_preview[:320],
            latency_ms=latency_ms,
        )
        self._records[trace_id] = record
        while len(self._records) > self._max_records:
            # dicts keep insertion order, so the first key is the oldest record.
            del self._records[next(iter(self._records))]
        return record

    def get(self, trace_id: str) -> DispatchRecord:
        record = self._records.get(trace_id)
        if record is None:
            raise KeyError(f"Trace not found: {trace_id}")
        return record

    def list_recent(self, limit: int = 20) -> list[DispatchRecord]:
        return list(self._records.values())[-limit:]

    def summary(self) -> dict[str, object]:
        """Aggregate dispatch metrics for dashboard display."""
        records = list(self._records.values())
        total = len(records)
        if total == 0:
            return {
                "total_messages": 0,
                "flagged_messages": 0,
                "avg_latency_ms": 0.0,
                "p95_latency_ms": 0.0,
                "intents": {},
            }

        latencies = sorted(record.latency_ms for record in records)
        p95_index = max(0, int((len(latencies) * 0.95) - 1))
        return {
            "total_messages": total,
            "flagged_messages": sum(1 for record in records if record.flagged),
            "avg_latency_ms": sum(latencies) / total,
            "p95_latency_ms": latencies[p95_index],
            "intents": dict(Counter(record.intent for record in records)),
        }


class Timer:
    """Simple context timer used by the dispatcher and registry."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
