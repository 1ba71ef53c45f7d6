"""
Observability - Logging, Metrics and Health

Provides:
- Structured JSON (or plain text) logging with per-request IDs
- Request logging middleware for the HTTP API
- In-process counters for registry operations
- Health checks over the store and its event chain

Configuration:
- URAUTH_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- URAUTH_LOG_FORMAT: json, text (default: json in production)
- URAUTH_PRODUCTION: Enable production mode

Usage:
    from urauth.observability import get_logger

    logger = get_logger(__name__)
    logger.info("Ownership requested", uri=uri, owner_did=owner_did)
"""

import json
import logging
import os
import sys
import time
import uuid
from collections import Counter
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


# ============================================================
# CONFIGURATION
# ============================================================

def _is_production() -> bool:
    return os.environ.get("URAUTH_PRODUCTION", "").lower() in ("1", "true", "yes")


def _get_log_level() -> int:
    level = logging.getLevelName(os.environ.get("URAUTH_LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _use_json_logging() -> bool:
    format_str = os.environ.get("URAUTH_LOG_FORMAT", "").lower()
    if format_str in ("json", "text"):
        return format_str == "json"
    return _is_production()


# ============================================================
# STRUCTURED LOGGING
# ============================================================

_RECORD_FIELDS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line:

    {"timestamp": "...", "level": "INFO", "logger": "urauth.core.registry",
     "message": "Ownership requested", "request_id": "1a2b3c4d", "uri": "..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RECORD_FIELDS or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data)


class TextFormatter(logging.Formatter):
    """Readable single-line output for development."""

    def format(self, record: logging.LogRecord) -> str:
        request_id = request_id_var.get()
        prefix = f"[{request_id[:8]}] " if request_id else ""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

        extras = " ".join(
            f"{k}={v}" for k, v in record.__dict__.items()
            if k not in _RECORD_FIELDS and not k.startswith("_")
        )
        msg = f"{timestamp} {record.levelname:8} {prefix}{record.name}: {record.getMessage()}"
        if extras:
            msg += f" ({extras})"

        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)
        return msg


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that turns keyword arguments into structured fields.

        logger.info("Document updated", uri=uri, remaining=0)
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.get("extra", {})
        for key in list(kwargs.keys()):
            if key not in ("exc_info", "stack_info", "stacklevel", "extra"):
                extra[key] = kwargs.pop(key)
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    return ContextLogger(logging.getLogger(name), {})


def setup_logging() -> None:
    """
    Configure root logging.

    Call once at startup.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(_get_log_level())

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(_get_log_level())
    handler.setFormatter(StructuredFormatter() if _use_json_logging() else TextFormatter())
    root_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ============================================================
# REQUEST CONTEXT MIDDLEWARE
# ============================================================

class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an ID and logs it with its latency.

    Honors an incoming X-Request-ID header and echoes the ID back.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])
        token = request_id_var.set(request_id)

        logger = get_logger("urauth.request")
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            get_metrics().record_request(duration_ms, success=False)
            logger.exception(
                f"{request.method} {request.url.path} -> 500",
                method=request.method,
                path=request.url.path,
                status_code=500,
                duration_ms=round(duration_ms, 2),
                error=str(e),
            )
            raise
        else:
            duration_ms = (time.perf_counter() - start_time) * 1000
            get_metrics().record_request(duration_ms, success=response.status_code < 400)
            logger.log(
                logging.INFO if response.status_code < 400 else logging.WARNING,
                f"{request.method} {request.url.path} -> {response.status_code}",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            request_id_var.reset(token)


# ============================================================
# METRICS
# ============================================================

MAX_SAMPLES = 1000


@dataclass
class MetricsCollector:
    """
    In-process counters for the registry.

    Operation counts are keyed by operation name; failures by error code.
    """
    operations: Counter = field(default_factory=Counter)
    failures: Counter = field(default_factory=Counter)
    events_emitted: int = 0
    requests_total: int = 0
    requests_failed: int = 0
    operation_latencies_ms: list = field(default_factory=list)
    request_latencies_ms: list = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock, repr=False)

    def record_operation(
        self,
        name: str,
        latency_ms: float,
        error_code: Optional[str] = None,
        events: int = 0,
    ) -> None:
        with self._lock:
            self.operations[name] += 1
            if error_code is not None:
                self.failures[error_code] += 1
            self.events_emitted += events
            self.operation_latencies_ms.append(latency_ms)
            del self.operation_latencies_ms[:-MAX_SAMPLES]

    def record_request(self, latency_ms: float, success: bool) -> None:
        with self._lock:
            self.requests_total += 1
            if not success:
                self.requests_failed += 1
            self.request_latencies_ms.append(latency_ms)
            del self.request_latencies_ms[:-MAX_SAMPLES]

    def reset(self) -> None:
        with self._lock:
            self.operations.clear()
            self.failures.clear()
            self.events_emitted = 0
            self.requests_total = 0
            self.requests_failed = 0
            self.operation_latencies_ms.clear()
            self.request_latencies_ms.clear()

    def get_summary(self) -> Dict[str, Any]:
        def percentile(data: list, p: float) -> Optional[float]:
            if not data:
                return None
            ordered = sorted(data)
            return ordered[min(int(len(ordered) * p), len(ordered) - 1)]

        with self._lock:
            return {
                "operations": dict(self.operations),
                "failures": dict(self.failures),
                "events_emitted": self.events_emitted,
                "requests_total": self.requests_total,
                "requests_failed": self.requests_failed,
                "operation_latency_p50_ms": percentile(self.operation_latencies_ms, 0.5),
                "operation_latency_p95_ms": percentile(self.operation_latencies_ms, 0.95),
                "request_latency_p50_ms": percentile(self.request_latencies_ms, 0.5),
                "request_latency_p95_ms": percentile(self.request_latencies_ms, 0.95),
            }


_metrics = MetricsCollector()


def get_metrics() -> MetricsCollector:
    """Process-wide metrics collector."""
    return _metrics


# ============================================================
# HEALTH CHECKS
# ============================================================

@dataclass
class HealthStatus:
    healthy: bool
    checks: Dict[str, Dict[str, Any]]
    duration_ms: float


def check_health(registry=None, store=None) -> HealthStatus:
    """
    Run health checks.

    Args:
        registry: URAuthRegistry instance (oracle quorum readiness)
        store: RegistryStore instance (event chain)
    """
    start = time.perf_counter()
    checks: Dict[str, Dict[str, Any]] = {"liveness": {"status": "healthy"}}
    all_healthy = True

    if store is not None:
        head = store.get_head()
        is_valid = store.verify_chain()
        checks["event_chain"] = {
            "status": "healthy" if is_valid else "unhealthy",
            "valid": is_valid,
            "event_count": head.next_sequence,
            "last_hash": head.last_event_hash[:16] + "..." if head.last_event_hash else None,
        }
        all_healthy = all_healthy and is_valid

    if registry is not None:
        members = registry.oracle_members()
        # No members means no request can ever be verified; degraded, not down
        checks["oracle_quorum"] = {
            "status": "healthy" if members else "degraded",
            "member_count": len(members),
            "current_step": registry.current_step(),
        }

    duration_ms = (time.perf_counter() - start) * 1000
    return HealthStatus(
        healthy=all_healthy,
        checks=checks,
        duration_ms=round(duration_ms, 2),
    )
