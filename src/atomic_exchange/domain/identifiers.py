"""Deterministic identifier derivation.

IDs are digests over a canonical, length-prefixed encoding of their inputs,
so no two distinct field tuples can encode to the same bytes. The digest is
injected; SHA-256 is the default.
"""

from __future__ import annotations

import hashlib
import secrets
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from atomic_exchange.domain.models import Swap

Digest = Callable[[bytes], bytes]

DIGEST_LENGTH = 32
SECRET_LENGTH = 32

# Integers encode as 16 bytes, the uint range of the host ledger.
UINT_MAX = (1 << 128) - 1

Field = bytes | str | int | bool


def sha256_digest(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def generate_secret(digest: Digest = sha256_digest) -> tuple[bytes, bytes]:
    """Draw a random preimage and return it with its hash-lock.

    Usage:
        preimage, hash_lock = generate_secret()
        exchange.initiate_swap(ctx, participant, amount, hash_lock, ...)
        exchange.claim_swap(claim_ctx, swap_id, preimage)
    """
    preimage = secrets.token_bytes(SECRET_LENGTH)
    return preimage, digest(preimage)


def _field_bytes(value: Field) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, bool):
        return b"\x01" if value else b"\x00"
    if isinstance(value, int):
        if value < 0 or value > UINT_MAX:
            raise ValueError(f"integer {value} is outside the unsigned 128-bit range")
        return value.to_bytes(16, "big")
    return value.encode("utf-8")


def canonical_encode(*values: Field) -> bytes:
    """Encode fields as a sequence of 4-byte length prefixes plus payloads."""
    out = bytearray()
    for value in values:
        raw = _field_bytes(value)
        out += len(raw).to_bytes(4, "big")
        out += raw
    return bytes(out)


def derive_swap_id(
    initiator: str,
    participant: str,
    height: int,
    hash_lock: bytes,
    digest: Digest = sha256_digest,
) -> bytes:
    """Swap identity is (initiator, participant, creation height, hash-lock)."""
    return digest(canonical_encode(b"swap", initiator, participant, height, hash_lock))


def derive_pool_id(
    creator: str,
    height: int,
    pool_nonce: int,
    min_amount: int,
    max_amount: int,
    activation_threshold: int,
    digest: Digest = sha256_digest,
) -> bytes:
    """Pool identity is salted with a ledger-wide nonce so IDs never repeat."""
    return digest(
        canonical_encode(
            b"pool", creator, height, pool_nonce, min_amount, max_amount, activation_threshold
        )
    )


def encode_swap(swap: Swap) -> bytes:
    """Canonical encoding of a swap record, as handed to proof verifiers."""
    return canonical_encode(
        swap.swap_id,
        swap.initiator,
        swap.participant,
        swap.amount,
        swap.hash_lock,
        swap.time_lock,
        swap.swap_token,
        swap.target_chain,
        swap.target_address,
        swap.multi_sig_required,
        swap.privacy_level,
        swap.expiration_height,
    )
