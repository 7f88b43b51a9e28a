"""Typed application action dispatch."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from notedesk.logging import EventRecorder

ActionHandler = Callable[[], object]


@dataclass(slots=True, frozen=True)
class ActionDispatchError(Exception):
    """Represents deterministic action dispatch failures."""

    code: str
    message: str


class Action(str, Enum):
    NEW_FILE = "new-file"
    NEW_FOLDER = "new-folder"
    TOGGLE_SIDEBAR = "toggle-sidebar"
    CLOSE_FILE = "close-file"
    ABOUT = "about"

    @classmethod
    def parse(cls, name: str) -> Action:
        """Return the action for a menu event name."""
        for action in cls:
            if action.value == name:
                return action
        raise ActionDispatchError(code="UNKNOWN_ACTION", message=f"Unknown action: {name}")


@dataclass(slots=True)
class ActionBus:
    """Subscribers per action, called in subscription order."""

    recorder: EventRecorder = field(default_factory=EventRecorder)
    _handlers: dict[Action, list[ActionHandler]] = field(default_factory=dict)

    def subscribe(self, action: Action, handler: ActionHandler) -> Callable[[], None]:
        """Register a handler and return a callable that removes it."""
        handlers = self._handlers.setdefault(action, [])
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def actions(self) -> tuple[Action, ...]:
        """Return actions that currently have subscribers."""
        return tuple(action for action in Action if self._handlers.get(action))

    def dispatch(self, action: Action | str) -> int:
        """Invoke every subscriber of `action`; returns the number handled."""
        if not isinstance(action, Action):
            action = Action.parse(action)
        handlers = list(self._handlers.get(action, ()))
        for handler in handlers:
            handler()
        self.recorder.record(
            "action.dispatch", arguments={"action": action.value, "count": len(handlers)}
        )
        return len(handlers)
