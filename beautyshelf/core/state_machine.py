from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence

from beautyshelf.models.product import USAGE_STATUSES


class InvalidTransition(ValueError):
    pass


def all_to_all(states: Sequence[str]) -> Dict[str, List[str]]:
    """Transition map where every state may move to every other state."""
    return {s: [t for t in states if t != s] for s in states}


USAGE_TRANSITIONS: Dict[str, List[str]] = all_to_all(USAGE_STATUSES)


class StateMachine:
    """
    Small, generic state machine over an allowed-transitions map.

    Usage:
      sm = StateMachine(state="new", allowed_transitions=USAGE_TRANSITIONS)
      step = sm.apply("finished")
      product.usage_status = step["to"]
    """

    def __init__(self, state: str, allowed_transitions: Dict[str, List[str]]):
        self.state = state or ""
        self.allowed_transitions = allowed_transitions or {}

    def is_state(self, value: Optional[str]) -> bool:
        return bool(value) and value in self.allowed_transitions

    def can_transition(self, to_state: str) -> bool:
        allowed = self.allowed_transitions.get(self.state, [])
        return to_state in allowed

    def apply(self, to_state: str) -> Dict[str, Any]:
        """
        Attempt to transition to `to_state`. Raises InvalidTransition.
        Returns dict with keys: from, to, changed.
        """
        to_state = (to_state or "").strip()
        if not to_state:
            raise InvalidTransition("Empty target state")

        # already there: no-op
        if to_state == self.state:
            return {"from": self.state, "to": self.state, "changed": False}

        if not self.can_transition(to_state):
            raise InvalidTransition(f"Invalid transition: {self.state} -> {to_state}")

        prev_state = self.state
        self.state = to_state
        return {"from": prev_state, "to": to_state, "changed": True}


def usage_state_machine(state: Optional[str]) -> StateMachine:
    """Machine for a product's usage status; a missing status starts at "new"."""
    start = state if state in USAGE_TRANSITIONS else "new"
    return StateMachine(state=start, allowed_transitions=USAGE_TRANSITIONS)
