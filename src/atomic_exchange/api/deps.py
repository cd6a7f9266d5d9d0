"""FastAPI dependency injection providers.

These are used with Depends() in route handlers to inject the exchange
facade and the per-request call context.
"""

from __future__ import annotations

from fastapi import Header, HTTPException, Request

from atomic_exchange.domain.context import MAX_HEIGHT, CallContext
from atomic_exchange.domain.identifiers import DIGEST_LENGTH
from atomic_exchange.services.exchange import AtomicExchange


def get_exchange(request: Request) -> AtomicExchange:
    """Provide the AtomicExchange owned by the application."""
    return request.app.state.exchange


def get_call_context(
    request: Request,
    x_caller: str = Header(..., min_length=1, description="Identity of the caller"),
    x_block_height: int | None = Header(
        default=None,
        ge=0,
        le=MAX_HEIGHT,
        description="Block height of the call; defaults to the clock",
    ),
) -> CallContext:
    """Build the CallContext for a mutating request.

    Without an explicit height the call runs at the exchange's current height.
    """
    exchange: AtomicExchange = request.app.state.exchange
    height = exchange.clock.current if x_block_height is None else x_block_height
    return CallContext(caller=x_caller, height=height)


def parse_digest(value: str, name: str) -> bytes:
    """Decode a 32-byte hex identifier taken from the URL path."""
    text = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        raw = bytes.fromhex(text)
    except ValueError:
        raw = b""
    if len(raw) != DIGEST_LENGTH:
        raise HTTPException(
            status_code=422,
            detail=f"{name} must be {DIGEST_LENGTH} bytes of hex",
        )
    return raw


def get_swap_id(swap_id: str) -> bytes:
    return parse_digest(swap_id, "swap_id")


def get_pool_id(pool_id: str) -> bytes:
    return parse_digest(pool_id, "pool_id")
