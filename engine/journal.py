"""
Delve — engine/journal.py
Expedition Journal: Append-only JSONL log of world and fog events.
======================================================================
Version:     0.1
Stack:       Python 3.11+ | stdlib json | bespoke EventBus
Status:      The logging layer. No gameplay logic here.

Architecture notes
------------------
- The journal is a PASSIVE wildcard subscriber. It never emits events.
- Append-only JSONL. Inscribed entries are immutable after write.
- Significance gate (int 1–5): events below JOURNAL_SIGNIFICANCE_MIN
  are discarded silently. Default threshold = 2, so per-tile fog noise
  never reaches disk.
- Simulation time (tick/elapsed) is injected via GameClock. The journal
  never reads the system clock for entry timestamps.

Significance Scoring Reference (JOURNAL_SIGNIFICANCE_MIN = 2)
--------------------------------------------------------------
  1 — ambient / noise (EVT_TILE_DISCOVERED, EVT_CHAMBER_DEFERRED)
  2 — routine (EVT_BLOCK_MINED, EVT_MINING_CANCELLED, EVT_CHAMBER_STARTED)
  3 — notable (EVT_CHAMBER_REVEALED, EVT_ORES_PLACED, save/load)
  4 — significant (EVT_MAP_GENERATED)
  5 — session markers
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, List

from engine.events import (
    WorldEvent,
    EventBus,
    EVT_MAP_GENERATED,
    EVT_ORES_PLACED,
    EVT_BLOCK_MINED,
    EVT_MINING_CANCELLED,
    EVT_TILE_DISCOVERED,
    EVT_CHAMBER_STARTED,
    EVT_CHAMBER_REVEALED,
    EVT_CHAMBER_DEFERRED,
    EVT_DISCOVERY_SAVED,
    EVT_DISCOVERY_LOADED,
)


# ============================================================
# DESIGN VARIABLE DEFAULTS
# ============================================================

JOURNAL_SIGNIFICANCE_MIN: int = 2

_SIGNIFICANCE_TABLE: Dict[str, int] = {
    EVT_TILE_DISCOVERED:   1,
    EVT_CHAMBER_DEFERRED:  1,

    EVT_BLOCK_MINED:       2,
    EVT_MINING_CANCELLED:  2,
    EVT_CHAMBER_STARTED:   2,

    EVT_CHAMBER_REVEALED:  3,
    EVT_ORES_PLACED:       3,
    EVT_DISCOVERY_SAVED:   3,
    EVT_DISCOVERY_LOADED:  3,

    EVT_MAP_GENERATED:     4,
}


@dataclass
class GameClock:
    """
    Simulation time. Used in journal entries.

    tick:    frames advanced since the session began
    elapsed: simulated seconds since the session began
    """
    tick: int = 0
    elapsed: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"tick": self.tick, "elapsed": round(self.elapsed, 6)}

    def advance(self, dt: float) -> "GameClock":
        """Return a new clock one tick and dt seconds later."""
        return GameClock(tick=self.tick + 1, elapsed=self.elapsed + dt)


@dataclass(frozen=True)
class JournalEntry:
    """Immutable record of a single inscribed event."""
    event_id: str                       # UUID4 string
    timestamp: Dict[str, Any]           # {tick, elapsed}
    source: str
    target: Any
    event_type: str
    data: Dict[str, Any]
    significance: int                   # 1–5

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-safe dict for JSONL write."""
        return {
            "event_id":     self.event_id,
            "timestamp":    self.timestamp,
            "source":       self.source,
            "target":       self.target,
            "event_type":   self.event_type,
            "data":         self.data,
            "significance": self.significance,
        }


def score_significance(event: WorldEvent) -> int:
    """
    Return significance score (int 1–5) for an event.

    A chamber that hit the size cap is raised to 4 so truncated
    reveals stand out in the journal.
    """
    base = _SIGNIFICANCE_TABLE.get(event.event_key, 1)
    if event.event_key == EVT_CHAMBER_REVEALED and event.data.get("truncated"):
        base = max(base, 4)
    return base


class JournalInscriber:
    """
    Wildcard subscriber that inscribes qualifying events to an
    append-only JSONL file.

    Usage:
        bus = EventBus()
        journal = JournalInscriber(bus=bus, journal_path=Path("sessions/journal.jsonl"))
        journal.open_session()
        # ... game loop ...
        journal.close_session()
    """

    def __init__(
        self,
        bus: EventBus,
        journal_path: Path,
        clock: GameClock | None = None,
        significance_min: int = JOURNAL_SIGNIFICANCE_MIN,
    ) -> None:
        self.bus = bus
        self.journal_path = journal_path
        self.clock = clock or GameClock()
        self.significance_min = significance_min

        self.journal_path.parent.mkdir(parents=True, exist_ok=True)
        bus.subscribe("*", self._on_event)

    def open_session(self) -> None:
        """Inscribe session-open marker unconditionally."""
        marker = WorldEvent(
            event_key="journal.session_opened",
            source="system",
            data={"clock": self.clock.to_dict()},
        )
        self._inscribe(marker, significance=5)

    def close_session(self) -> None:
        """Inscribe session-close marker unconditionally."""
        marker = WorldEvent(
            event_key="journal.session_closed",
            source="system",
            data={"clock": self.clock.to_dict()},
        )
        self._inscribe(marker, significance=5)

    def _on_event(self, event: WorldEvent) -> None:
        significance = score_significance(event)
        if significance < self.significance_min:
            return
        self._inscribe(event, significance=significance)

    def _inscribe(self, event: WorldEvent, significance: int) -> JournalEntry:
        entry = JournalEntry(
            event_id=str(uuid.uuid4()),
            timestamp=self.clock.to_dict(),
            source=event.source,
            target=event.target,
            event_type=event.event_key,
            data=dict(event.data),
            significance=significance,
        )
        with open(self.journal_path, "a", encoding="utf-8") as fh:
            fh.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")
        return entry


class JournalReader:
    """
    Read-only query interface for a journal.jsonl file.
    All queries return lists of dicts in insertion order.
    """

    def __init__(self, journal_path: Path) -> None:
        self.journal_path = journal_path

    def all_entries(self) -> List[Dict[str, Any]]:
        if not self.journal_path.exists():
            return []
        entries = []
        with open(self.journal_path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if line:
                    entries.append(json.loads(line))
        return entries

    def by_event_type(self, event_type: str) -> List[Dict[str, Any]]:
        return [e for e in self.all_entries() if e.get("event_type") == event_type]

    def by_significance(self, minimum: int) -> List[Dict[str, Any]]:
        return [e for e in self.all_entries() if e.get("significance", 0) >= minimum]

    def session_markers(self) -> List[Dict[str, Any]]:
        return [
            e for e in self.all_entries()
            if e.get("event_type", "").startswith("journal.session")
        ]
