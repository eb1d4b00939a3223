"""Component health monitoring package."""

from src.health.aggregator import summarize
from src.health.cache import ComponentHealthKey, PollSignature, ResultCache
from src.health.classifier import classify, status_priority, unsupported_result
from src.health.config import HealthEngineConfig
from src.health.dispatcher import PollDispatcher
from src.health.eligibility import filter_eligible, is_eligible
from src.health.errors import HealthEngineError, InvalidComponentSetError, PollCancelledError
from src.health.models import (
    HealthCheckResult,
    HealthStatus,
    HealthSummary,
    ProbeOutcome,
    ProbeResponse,
)
from src.health.session import HealthSession, HealthView, SessionPool
from src.health.transport import HealthTransport, HttpHealthTransport

# Note: init_health_engine is intentionally not exported here to avoid
# circular imports. Import directly from src.health.setup when needed.

__all__ = [
    "ComponentHealthKey",
    "HealthCheckResult",
    "HealthEngineConfig",
    "HealthEngineError",
    "HealthSession",
    "HealthStatus",
    "HealthSummary",
    "HealthTransport",
    "HealthView",
    "HttpHealthTransport",
    "InvalidComponentSetError",
    "PollCancelledError",
    "PollDispatcher",
    "PollSignature",
    "ProbeOutcome",
    "ProbeResponse",
    "ResultCache",
    "SessionPool",
    "classify",
    "filter_eligible",
    "is_eligible",
    "status_priority",
    "summarize",
    "unsupported_result",
]
