"""
Delve — engine/data_loader.py
JIT Data Loaders for TOML seed data powered by Pydantic.
=============================================================================================
Version:     0.2 (block types, cave generation and fog settings)
Stack:       Python 3.11+ | Pydantic v2 | tomllib
Status:      Core data validation and loading layer.
"""

import tomllib
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator

# ================================================================================
# SCHEMAS
# ================================================================================

class BlockDef(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str
    name: str
    glyph: str = "#"
    mining_time: float = Field(default=3.0, ge=0.5, le=10.0) # seconds to mine
    drop_item: Optional[str] = None
    min_drop: int = Field(default=1, ge=1, le=10)
    max_drop: int = Field(default=3, ge=1, le=10)

    @model_validator(mode="after")
    def _check_drop_range(self) -> "BlockDef":
        if self.min_drop > self.max_drop:
            raise ValueError(f"Block '{self.id}': min_drop {self.min_drop} > max_drop {self.max_drop}")
        return self

class OreDistributionDef(BaseModel):
    model_config = ConfigDict(frozen=True)
    block: str
    percentage: float = Field(default=5.0, ge=0.0, le=100.0) # of solid tiles
    min_vein_size: int = Field(default=3, ge=1, le=10)
    max_vein_size: int = Field(default=7, ge=1, le=10)

    @model_validator(mode="after")
    def _check_vein_range(self) -> "OreDistributionDef":
        if self.min_vein_size > self.max_vein_size:
            raise ValueError(
                f"Ore '{self.block}': min_vein_size {self.min_vein_size} > max_vein_size {self.max_vein_size}"
            )
        return self

class GenerationDef(BaseModel):
    model_config = ConfigDict(frozen=True)
    map_size: int = Field(default=64, gt=0)
    spawn_clear_radius: int = Field(default=3, ge=0)
    initial_cave_density: float = Field(default=0.45, ge=0.0, le=1.0)
    cave_smoothing_iterations: int = Field(default=5, ge=0)
    base_block: str = "stone"
    ores: List[OreDistributionDef] = Field(default_factory=list)

class FogDef(BaseModel):
    model_config = ConfigDict(frozen=True)
    discovery_radius: float = Field(default=4.5, gt=0.0)
    fade_duration: float = Field(default=0.5, gt=0.0)
    update_interval: float = Field(default=0.1, gt=0.0)
    movement_threshold: float = Field(default=0.1, ge=0.0)
    chamber_reveal_enabled: bool = True
    max_chamber_size: int = Field(default=500, gt=0)
    chamber_tile_delay: float = Field(default=0.02, ge=0.0)
    fog_alpha: float = Field(default=1.0, gt=0.0, le=1.0)
    chunk_size: int = Field(default=32, gt=0)

# ================================================================================
# LOADERS & CACHE (JIT)
# ================================================================================

_BLOCK_CACHE: Dict[str, BlockDef] = {}
_GENERATION_CACHE: Optional[GenerationDef] = None
_FOG_CACHE: Optional[FogDef] = None


DATA_DIR = Path(__file__).parent.parent / "data"

def get_block_def(block_id: str) -> BlockDef:
    """JIT loads a block type definition from TOML."""
    if block_id in _BLOCK_CACHE:
        return _BLOCK_CACHE[block_id]

    path = DATA_DIR / "blocks" / f"{block_id}.toml"
    if not path.exists():
        raise FileNotFoundError(f"Block definition not found: {path}")

    with open(path, "rb") as f:
        data = tomllib.load(f)

    block = BlockDef(**data)
    _BLOCK_CACHE[block_id] = block
    return block

def get_block_defs() -> Dict[str, BlockDef]:
    """Pre-loads every block definition under data/blocks."""
    path = DATA_DIR / "blocks"
    if not path.exists():
        return {}

    for file in path.glob("*.toml"):
        if file.stem not in _BLOCK_CACHE:
            get_block_def(file.stem)

    return _BLOCK_CACHE

def get_generation_def() -> GenerationDef:
    """Loads the cave generation settings. Cached globally."""
    global _GENERATION_CACHE
    if _GENERATION_CACHE is not None:
        return _GENERATION_CACHE

    path = DATA_DIR / "world" / "generation.toml"
    if not path.exists():
        return GenerationDef()

    with open(path, "rb") as f:
        data = tomllib.load(f)

    _GENERATION_CACHE = GenerationDef(**data)
    return _GENERATION_CACHE

def get_fog_def() -> FogDef:
    """Loads the exploration fog settings. Cached globally."""
    global _FOG_CACHE
    if _FOG_CACHE is not None:
        return _FOG_CACHE

    path = DATA_DIR / "world" / "fog.toml"
    if not path.exists():
        return FogDef()

    with open(path, "rb") as f:
        data = tomllib.load(f)

    _FOG_CACHE = FogDef(**data)
    return _FOG_CACHE
