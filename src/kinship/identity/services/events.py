from __future__ import annotations

from typing import Any, List, Protocol, Tuple

from shared.logging import get_logger

_INFO_EVENTS = frozenset({"primary_created", "primaries_merged", "secondary_created", "identify_completed"})


class IdentityEventHook(Protocol):
    def __call__(self, event: str, **payload: Any) -> None:
        ...


class LoggingEventHook:
    """Emit resolver phase events through structlog."""

    def __init__(self, name: str = "identity.resolver") -> None:
        self._logger = get_logger(name)

    def __call__(self, event: str, **payload: Any) -> None:
        if event in _INFO_EVENTS:
            self._logger.info(event, **payload)
        else:
            self._logger.debug(event, **payload)


class NullEventHook:
    def __call__(self, event: str, **payload: Any) -> None:
        return None


class RecordingEventHook:
    """Keeps every emitted event in order; handy for tests and diagnostics."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, dict[str, Any]]] = []

    def __call__(self, event: str, **payload: Any) -> None:
        self.events.append((event, dict(payload)))

    def names(self) -> List[str]:
        return [name for name, _ in self.events]


__all__ = ["IdentityEventHook", "LoggingEventHook", "NullEventHook", "RecordingEventHook"]
