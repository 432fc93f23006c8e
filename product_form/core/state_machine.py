from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

IDLE = "idle"
IN_FLIGHT = "in_flight"

SUBMISSION_TRANSITIONS: Dict[str, List[str]] = {
    IDLE: [IN_FLIGHT],
    IN_FLIGHT: [IDLE],
}


class InvalidTransition(ValueError):
    pass


HistoryEntry = Dict[str, Any]
Hook = Callable[[HistoryEntry], None]


class StateMachine:
    """
    Small state machine with:
      - allowed transitions map
      - bounded history recording (with metadata)
      - optional after hooks per transition

    Usage:
      sm = StateMachine()                      # idle <-> in_flight
      sm.apply(IN_FLIGHT, meta={"fields": 4})
      sm.apply(IDLE, meta={"outcome": "submitted"})
    """

    def __init__(self, state: str = IDLE, allowed_transitions: Optional[Dict[str, List[str]]] = None,
                 history_limit: int = 50):
        self.state = state or IDLE
        self.allowed_transitions = allowed_transitions or SUBMISSION_TRANSITIONS
        self.history_limit = max(int(history_limit or 0), 0)
        self.history: List[HistoryEntry] = []
        # hooks keyed by (from_state, to_state) tuple
        self._after_hooks: Dict[Tuple[str, str], List[Hook]] = {}

    def can_transition(self, to_state: str) -> bool:
        allowed = self.allowed_transitions.get(self.state, [])
        return to_state in allowed

    def register_after(self, from_state: str, to_state: str, fn: Hook) -> None:
        self._after_hooks.setdefault((from_state, to_state), []).append(fn)

    def _invoke_hooks(self, from_state: str, to_state: str, entry: HistoryEntry):
        for fn in self._after_hooks.get((from_state, to_state), []):
            try:
                fn(entry)
            except Exception:
                # a hook must not leave the machine half-transitioned
                logger.exception("Transition hook failed for %s -> %s", from_state, to_state)

    def apply(self, to_state: str, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Transition to `to_state`. Raises InvalidTransition when the move is not allowed.
        Returns dict with keys: state, previous.
        """
        to_state = (to_state or "").strip()
        if not to_state:
            raise InvalidTransition("Empty target state")

        if not self.can_transition(to_state):
            raise InvalidTransition(f"Invalid transition: {self.state} -> {to_state}")

        entry: HistoryEntry = {
            "from": self.state,
            "to": to_state,
            "at": datetime.now(timezone.utc).isoformat(sep=" "),
            "meta": dict(meta or {}),
        }

        prev_state = self.state
        self.state = to_state
        self.history.append(entry)
        if len(self.history) > self.history_limit:
            del self.history[: len(self.history) - self.history_limit]
        logger.debug("Submission state %s -> %s %s", prev_state, to_state, entry["meta"])

        self._invoke_hooks(prev_state, to_state, entry)

        return {"state": self.state, "previous": prev_state}

    def states_seen(self) -> List[str]:
        """Initial state followed by every state entered, oldest first (within the history window)."""
        if not self.history:
            return [self.state]
        return [self.history[0]["from"]] + [h["to"] for h in self.history]
