from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass
from datetime import datetime
from threading import Lock

from app.core.clock import utc_now

API_PREFIX = "/api/v1/"
SYSTEM_RESOURCE = "system"


def resource_of(route: str) -> str:
    """Name the API resource a route template belongs to.

    `/api/v1/stats/practice` -> `stats`, `/api/v1/practice-sessions/{id}` ->
    `practice-sessions`. Anything outside the versioned API (health, metrics,
    unmatched paths) is grouped under `system`.
    """
    if not route.startswith(API_PREFIX):
        return SYSTEM_RESOURCE
    head = route[len(API_PREFIX):].split("/", 1)[0]
    return head or SYSTEM_RESOURCE


@dataclass(slots=True)
class RouteLatency:
    count: int = 0
    total_latency_ms: float = 0.0
    max_latency_ms: float = 0.0
    slow_count: int = 0
    server_error_count: int = 0

    def add(self, latency_ms: float, *, is_slow: bool, is_server_error: bool) -> None:
        self.count += 1
        self.total_latency_ms += latency_ms
        self.max_latency_ms = max(self.max_latency_ms, latency_ms)
        if is_slow:
            self.slow_count += 1
        if is_server_error:
            self.server_error_count += 1

    @property
    def avg_latency_ms(self) -> float:
        return self.total_latency_ms / self.count if self.count else 0.0


@dataclass(slots=True)
class ServerErrorEvent:
    timestamp: datetime
    request_id: str
    method: str
    path: str
    route: str
    resource: str
    status_code: int
    latency_ms: float


class ObservabilityRegistry:
    """In-process request metrics for `/ops/metrics`.

    Requests are keyed by route template so `/api/v1/practice-sessions/{id}`
    is one entry however many sessions are read. Counters live for the
    lifetime of the process and are cleared by `reset()`.
    """

    def __init__(self, max_recent_errors: int = 20) -> None:
        self._lock = Lock()
        self._max_recent_errors = max(1, max_recent_errors)
        self._recent_errors: deque[ServerErrorEvent] = deque(
            maxlen=self._max_recent_errors
        )
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._started_at = utc_now()
            self._overall = RouteLatency()
            self._status_counts: Counter[str] = Counter()
            self._resource_counts: Counter[str] = Counter()
            self._routes: dict[str, RouteLatency] = {}
            self._recent_errors.clear()

    def configure(self, *, max_recent_errors: int | None = None) -> None:
        with self._lock:
            if max_recent_errors is None:
                return
            normalized = max(1, max_recent_errors)
            if normalized == self._max_recent_errors:
                return
            self._max_recent_errors = normalized
            self._recent_errors = deque(self._recent_errors, maxlen=normalized)

    def observe(
        self,
        *,
        request_id: str,
        method: str,
        path: str,
        route: str,
        status_code: int,
        latency_ms: float,
        is_slow: bool,
    ) -> None:
        endpoint = f"{method} {route}"
        resource = resource_of(route)
        is_server_error = status_code >= 500
        with self._lock:
            self._overall.add(latency_ms, is_slow=is_slow, is_server_error=is_server_error)
            self._status_counts[str(status_code)] += 1
            self._resource_counts[resource] += 1
            self._routes.setdefault(endpoint, RouteLatency()).add(
                latency_ms, is_slow=is_slow, is_server_error=is_server_error
            )
            if is_server_error:
                self._recent_errors.append(
                    ServerErrorEvent(
                        timestamp=utc_now(),
                        request_id=request_id,
                        method=method,
                        path=path,
                        route=route,
                        resource=resource,
                        status_code=status_code,
                        latency_ms=latency_ms,
                    )
                )

    def snapshot(self, *, slow_request_threshold_ms: int, top_n: int = 10) -> dict:
        with self._lock:
            busiest = sorted(
                self._routes.items(),
                key=lambda item: (-item[1].count, item[0]),
            )[: max(1, top_n)]
            routes = [
                {
                    "endpoint": endpoint,
                    "count": stats.count,
                    "avg_latency_ms": round(stats.avg_latency_ms, 2),
                    "max_latency_ms": round(stats.max_latency_ms, 2),
                    "slow_count": stats.slow_count,
                    "server_error_count": stats.server_error_count,
                }
                for endpoint, stats in busiest
            ]
            recent_errors = [
                {
                    "timestamp": event.timestamp,
                    "request_id": event.request_id,
                    "method": event.method,
                    "path": event.path,
                    "route": event.route,
                    "resource": event.resource,
                    "status_code": event.status_code,
                    "latency_ms": round(event.latency_ms, 2),
                }
                for event in reversed(self._recent_errors)
            ]
            return {
                "started_at": self._started_at,
                "total_requests": self._overall.count,
                "status_counts": dict(self._status_counts),
                "resource_counts": dict(self._resource_counts),
                "avg_latency_ms": round(self._overall.avg_latency_ms, 2),
                "max_latency_ms": round(self._overall.max_latency_ms, 2),
                "slow_request_count": self._overall.slow_count,
                "server_error_count": self._overall.server_error_count,
                "slow_request_threshold_ms": slow_request_threshold_ms,
                "routes": routes,
                "recent_errors": recent_errors,
            }


observability_registry = ObservabilityRegistry()
