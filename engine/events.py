"""
Delve — engine/events.py
World Event Bus: typed pub-sub shared by generation, fog and mining.
=====================================================================
Version:     0.1
Stack:       Python 3.11+ | Pydantic v2 | bespoke pub-sub

Architecture notes
------------------
- EventBus is Pydantic v2–typed. All events are WorldEvent instances.
- The bus is injected at construction. There is no global singleton.
- The journal receives every event via wildcard subscription ("*").
"""

from __future__ import annotations

import sys
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field


# ============================================================
# CANONICAL EVENT KEYS
# Never use raw strings. Add new keys here only.
# ============================================================

EVT_MAP_GENERATED        = "world.map_generated"
EVT_ORES_PLACED          = "world.ores_placed"
EVT_BLOCK_MINED          = "world.block_mined"
EVT_MINING_CANCELLED     = "world.mining_cancelled"

EVT_TILE_DISCOVERED      = "fog.tile_discovered"
EVT_CHAMBER_STARTED      = "fog.chamber_started"
EVT_CHAMBER_REVEALED     = "fog.chamber_revealed"
EVT_CHAMBER_DEFERRED     = "fog.chamber_deferred"
EVT_DISCOVERY_SAVED      = "fog.discovery_saved"
EVT_DISCOVERY_LOADED     = "fog.discovery_loaded"


# ============================================================
# EVENT MODEL  (Pydantic v2)
# data dict must remain flat + JSON-serializable.
# ============================================================

class WorldEvent(BaseModel):
    """Base envelope. The journal receives these directly."""
    event_key: str
    source: str
    target: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


HandlerFn = Callable[[WorldEvent], None]


class EventBus:
    """
    Bespoke pub-sub. Pass instance at construction — no global singleton.

    Wildcard key "*" receives every emitted event (used by the journal).
    Per-handler errors are reported on stderr so emission always continues.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[HandlerFn]] = {}

    def subscribe(self, event_key: str, handler: HandlerFn) -> None:
        self._subscribers.setdefault(event_key, []).append(handler)

    def unsubscribe(self, event_key: str, handler: HandlerFn) -> None:
        if event_key in self._subscribers:
            self._subscribers[event_key] = [
                h for h in self._subscribers[event_key] if h != handler
            ]

    def emit(self, event: WorldEvent) -> None:
        targets = (
            self._subscribers.get(event.event_key, [])
            + self._subscribers.get("*", [])
        )
        for handler in targets:
            try:
                handler(event)
            except Exception as exc:  # noqa: BLE001
                print(
                    f"[EventBus] Handler error on '{event.event_key}': {exc}",
                    file=sys.stderr,
                )
