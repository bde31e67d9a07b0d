"""Chart-driven finite-state machine."""

import logging
from typing import Any, Mapping

log = logging.getLogger(__name__)


class StateMachine:
    """
    Runs a state chart of the form::

        {"initial": "idle", "states": {"idle": {"on": {"GO": "busy"}}, ...}}

    Events not listed for the current state leave it unchanged.
    """

    def __init__(self, chart: Mapping[str, Any]):
        states = chart["states"]
        initial = chart["initial"]
        if initial not in states:
            raise ValueError(f"Initial state {initial!r} not in chart")
        for name, node in states.items():
            for event, target in node.get("on", {}).items():
                if target not in states:
                    raise ValueError(f"{name} --{event}--> unknown state {target!r}")
        self.chart = chart
        self.state: str = initial

    def can(self, event: str) -> bool:
        return event in self.chart["states"][self.state].get("on", {})

    def send(self, event: str) -> str:
        """Apply an event and return the resulting state."""
        target = self.chart["states"][self.state].get("on", {}).get(event)
        if target is None:
            log.debug("Ignoring %s in state %s", event, self.state)
            return self.state
        log.debug("%s --%s--> %s", self.state, event, target)
        self.state = target
        return self.state
