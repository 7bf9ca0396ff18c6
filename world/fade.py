"""
Delve — world/fade.py
Fade Scheduler: per-tile fog fade-out advanced by elapsed time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from world.chunks import TileCoord
from world.exploration import DiscoveryField

@dataclass
class FadeAnimation:
    tile: TileCoord
    start_alpha: float
    duration: float
    elapsed: float = 0.0

    @property
    def progress(self) -> float:
        return min(1.0, max(0.0, self.elapsed / self.duration))

    @property
    def alpha(self) -> float:
        # Ease-out: lerp(start, 0, t^2)
        t = self.progress
        return self.start_alpha + (0.0 - self.start_alpha) * (t * t)

    @property
    def finished(self) -> bool:
        return self.elapsed >= self.duration

class FadeScheduler:
    """
    Owns at most one FadeAnimation per tile.
    A finished animation removes the fog tile and completes the discovery.
    """
    def __init__(self, field: DiscoveryField, duration: float = 0.5):
        if duration <= 0:
            raise ValueError(f"Fade duration must be positive, got {duration}")
        self.field = field
        self.duration = duration
        self.animations: Dict[TileCoord, FadeAnimation] = {}

    def is_fading(self, tile: TileCoord) -> bool:
        return tile in self.animations

    def active_count(self) -> int:
        return len(self.animations)

    def start(self, tile: TileCoord) -> FadeAnimation:
        """Starts a fade from the tile's current fog alpha, replacing any running one."""
        self.cancel(tile)
        anim = FadeAnimation(tile=tile, start_alpha=self.field.fog_alpha_at(tile), duration=self.duration)
        self.animations[tile] = anim
        return anim

    def cancel(self, tile: TileCoord) -> None:
        """Drops the animation. The fog keeps its current alpha and the status is untouched."""
        self.animations.pop(tile, None)

    def cancel_all(self) -> None:
        self.animations.clear()

    def tick(self, dt: float) -> List[TileCoord]:
        """Advances every animation by dt seconds. Returns the tiles that completed."""
        completed: List[TileCoord] = []
        for tile, anim in list(self.animations.items()):
            anim.elapsed += dt
            if anim.finished:
                del self.animations[tile]
                self.field.complete_discovery(tile)
                completed.append(tile)
            else:
                self.field.set_fog_alpha(tile, anim.alpha)
        return completed
