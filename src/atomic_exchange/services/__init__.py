"""Application services: one engine per protocol component."""

from atomic_exchange.services.approval_service import MultiSigApprovalTracker
from atomic_exchange.services.exchange import AtomicExchange
from atomic_exchange.services.governance_service import GovernanceTreasury
from atomic_exchange.services.pool_service import MixingPoolEngine
from atomic_exchange.services.proof_service import ConfidentialProofGateway
from atomic_exchange.services.swap_service import SwapEngine

__all__ = [
    "AtomicExchange",
    "ConfidentialProofGateway",
    "GovernanceTreasury",
    "MixingPoolEngine",
    "MultiSigApprovalTracker",
    "SwapEngine",
]
