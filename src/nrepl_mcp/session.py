"""Bridge session - the shared mutable state behind every request."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_NAMESPACE = "user"


@dataclass
class BridgeSession:
    """The one session a running bridge serves.

    Handlers get this object passed in rather than reaching for a module
    global, so several bridges can live in one process (tests do this).

    Attribute reads and writes are single operations on the event loop, so a
    handler always sees a whole namespace name. Concurrent ``set-ns`` calls are
    not ordered against each other: the last write wins.
    """

    default_namespace: str = DEFAULT_NAMESPACE
    current_namespace: str = field(init=False)
    initialized: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.current_namespace = self.default_namespace

    def mark_initialized(self) -> None:
        """Record a successful initialize. Repeating it is harmless."""
        self.initialized = True

    def switch_namespace(self, namespace: str) -> None:
        self.current_namespace = namespace

    def reset(self) -> None:
        """Back to the state the bridge starts in."""
        self.current_namespace = self.default_namespace
        self.initialized = False
