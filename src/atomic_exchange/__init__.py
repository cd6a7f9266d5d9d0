"""Atomic Exchange: hash-time-locked cross-chain swaps, mixing pools and a fee treasury."""

__version__ = "1.0.0"
