"""Minimal observer used by document stores and the URL index.

Subscribers register with :meth:`Events.on` and get back an
:class:`EventRef` token; passing the token to :meth:`Events.offref`
unsubscribes.  Unsubscribing twice is a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable

_ids = count(1)


@dataclass(frozen=True)
class EventRef:
    name: str
    callback: Callable[..., Any] = field(compare=False)
    id: int = field(default_factory=lambda: next(_ids))


class Events:
    """Named-event registry with token based unsubscription."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventRef]] = {}

    def on(self, name: str, callback: Callable[..., Any]) -> EventRef:
        ref = EventRef(name, callback)
        self._handlers.setdefault(name, []).append(ref)
        return ref

    def offref(self, ref: EventRef) -> None:
        handlers = self._handlers.get(ref.name)
        if not handlers or ref not in handlers:
            return
        handlers.remove(ref)
        if not handlers:
            del self._handlers[ref.name]

    def off(self, name: str, callback: Callable[..., Any]) -> None:
        """Remove every registration of *callback* for *name*."""
        for ref in [r for r in self._handlers.get(name, []) if r.callback == callback]:
            self.offref(ref)

    def trigger(self, name: str, *args: Any) -> None:
        """Call every handler registered for *name*, in registration order."""
        # Copy so handlers may unsubscribe while being called
        for ref in list(self._handlers.get(name, [])):
            ref.callback(*args)

    def listener_count(self, name: str) -> int:
        return len(self._handlers.get(name, []))
