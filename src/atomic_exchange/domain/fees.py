"""Fee calculator.

fee = amount * basis_points / denominator, rounded down. The denominator is
1000 by default, so 5 "basis points" is 0.5%.
"""

from __future__ import annotations

from dataclasses import dataclass

from atomic_exchange.domain.exceptions import InvalidFeeError

DEFAULT_FEE_DENOMINATOR = 1000


def compute_fee(amount: int, basis_points: int, denominator: int = DEFAULT_FEE_DENOMINATOR) -> int:
    if amount < 0 or basis_points < 0:
        raise InvalidFeeError(f"Fee inputs must be non-negative: amount={amount}, bps={basis_points}")
    if denominator <= 0:
        raise InvalidFeeError(f"Fee denominator must be positive, got {denominator}")
    return amount * basis_points // denominator


@dataclass(frozen=True)
class FeeSchedule:
    """Mixer and protocol fee rates applied once at swap initiation."""

    mixer_bps: int = 5
    protocol_bps: int = 2
    denominator: int = DEFAULT_FEE_DENOMINATOR

    def __post_init__(self) -> None:
        if self.mixer_bps < 0 or self.protocol_bps < 0 or self.denominator <= 0:
            raise InvalidFeeError(f"Malformed fee schedule: {self}")
        # Combined fees may never exceed the amount they are charged on.
        if self.mixer_bps + self.protocol_bps > self.denominator:
            raise InvalidFeeError(
                f"Combined fee rate {self.mixer_bps + self.protocol_bps}/{self.denominator} exceeds 100%"
            )

    def quote(self, amount: int) -> tuple[int, int]:
        """Return (swap_fee, protocol_fee) for an amount."""
        return (
            compute_fee(amount, self.mixer_bps, self.denominator),
            compute_fee(amount, self.protocol_bps, self.denominator),
        )
