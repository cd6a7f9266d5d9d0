"""Health check endpoint.

Reports the journal backend and the current logical height. Used by
container healthchecks and load balancers.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from atomic_exchange.api.deps import get_exchange
from atomic_exchange.infrastructure.ledger.journal import MemoryJournal
from atomic_exchange.logging_config import get_logger
from atomic_exchange.schemas.exchange import HealthResponse
from atomic_exchange.services.exchange import AtomicExchange

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns the health status of the exchange and its journal.",
)
def health_check(exchange: AtomicExchange = Depends(get_exchange)) -> HealthResponse:
    """Probe the journal with a read; a failure reports degraded, not 500."""
    journal = exchange.store.journal
    backend = "memory" if isinstance(journal, MemoryJournal) else "sql"
    status = "ok"
    try:
        journal.entries()
        journal_status = f"{backend}: healthy"
    except Exception as exc:
        journal_status = f"{backend}: unhealthy: {exc}"
        status = "degraded"
        logger.error("health.journal_check_failed", error=str(exc))

    return HealthResponse(
        status=status,
        version=exchange.get_contract_version(),
        journal=journal_status,
        height=exchange.clock.current,
    )
