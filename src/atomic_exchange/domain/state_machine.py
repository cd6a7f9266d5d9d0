"""Lifecycle State Machine Guards.

Uses python-statemachine to enforce legal transitions at the domain level.
No matter what the engines or the API do, an illegal transition
(e.g., CLAIMED -> REFUNDED) will raise TransitionNotAllowed.

A machine is instantiated per record from its current status and fired
before the updated record is written to the ledger.

Transition tables:
    Swap:         PENDING  -> CLAIMED    (claim)
                  PENDING  -> REFUNDED   (refund)
    Pool:         FILLING  -> ACTIVE     (activate)
    Participant:  JOINED   -> WITHDRAWN  (withdraw)
"""

from __future__ import annotations

from statemachine import State, StateMachine


class _StatusMachine(StateMachine):
    """Shared construction from a stored status string."""

    EVENT_NAMES: tuple[str, ...] = ()

    def __init__(self, current_status: str) -> None:
        """Initialize the state machine at a given status.

        Args:
            current_status: The current status value (e.g., "PENDING").
                           Must match one of the State value strings exactly.
        """
        valid_values = {s.value for s in self.states}
        if current_status not in valid_values:
            valid = ", ".join(sorted(valid_values))
            raise ValueError(
                f"Unknown status '{current_status}'. Valid states: {valid}"
            )
        super().__init__(start_value=current_status)

    @property
    def status(self) -> str:
        """Return the current state value as a string."""
        return str(self.current_state.value)

    def get_allowed_events(self) -> list[str]:
        """Return a list of event names that can fire from the current state."""
        return [event.id for event in self.allowed_events]


class SwapStateMachine(_StatusMachine):
    """Guards the HTLC lifecycle. Both outcomes are terminal.

    Usage:
        sm = SwapStateMachine("PENDING")
        sm.claim()
        sm.status  # "CLAIMED"
    """

    PENDING = State("PENDING", initial=True)
    CLAIMED = State("CLAIMED", final=True)
    REFUNDED = State("REFUNDED", final=True)

    claim = PENDING.to(CLAIMED)
    refund = PENDING.to(REFUNDED)

    EVENT_NAMES = ("claim", "refund")

    def __init__(self, current_status: str = "PENDING") -> None:
        super().__init__(current_status)


class PoolStateMachine(_StatusMachine):
    """Guards mixing pool activation, which never reverts."""

    FILLING = State("FILLING", initial=True)
    ACTIVE = State("ACTIVE", final=True)

    activate = FILLING.to(ACTIVE)

    EVENT_NAMES = ("activate",)

    def __init__(self, current_status: str = "FILLING") -> None:
        super().__init__(current_status)


class ParticipantStateMachine(_StatusMachine):
    """Guards a mixer participant's single withdrawal."""

    JOINED = State("JOINED", initial=True)
    WITHDRAWN = State("WITHDRAWN", final=True)

    withdraw = JOINED.to(WITHDRAWN)

    EVENT_NAMES = ("withdraw",)

    def __init__(self, current_status: str = "JOINED") -> None:
        super().__init__(current_status)


MACHINES: dict[str, type[_StatusMachine]] = {
    "swap": SwapStateMachine,
    "pool": PoolStateMachine,
    "participant": ParticipantStateMachine,
}


def validate_transition(machine: str, current_status: str, event_name: str) -> str:
    """Validate a state transition and return the new status.

    Creates a temporary state machine of the named kind, fires the named
    event, and returns the resulting status string.

    Args:
        machine: One of "swap", "pool", "participant".
        current_status: Current status value.
        event_name: The event to fire (e.g., "claim").

    Returns:
        The new status string after the transition.

    Raises:
        TransitionNotAllowed: If the transition is illegal.
        ValueError: If the machine, status or event name is invalid.
    """
    machine_cls = MACHINES.get(machine)
    if machine_cls is None:
        raise ValueError(f"Unknown machine '{machine}'. Valid: {sorted(MACHINES)}")

    sm = machine_cls(current_status)

    if event_name not in machine_cls.EVENT_NAMES:
        raise ValueError(
            f"Unknown event '{event_name}'. "
            f"Allowed events from {current_status}: {sm.get_allowed_events()}"
        )

    getattr(sm, event_name)()
    return sm.status
