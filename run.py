"""
Delve — run.py
Command-line entry point: generates a cave map and simulates the first seconds of exploration.
Usage: python run.py [seed]
"""

import sys
from pathlib import Path

# Ensure we can import delve packages
project_root = Path(__file__).parent.resolve()
sys.path.insert(0, str(project_root))

from engine.loop import SimulationLoop

FRAME_DT = 1.0 / 60.0

def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    seed = int(argv[0]) if argv else None

    sim = SimulationLoop(journal_path=project_root / "sessions" / "journal.jsonl")
    sim.open_session()

    result = sim.generate_map(seed=seed)
    print(f"Map generated in {result.duration_ms:.1f}ms - {result.tile_count} tiles placed (seed {result.seed})")
    for block_id, count in result.ore_counts.items():
        print(f"  {block_id}: {count} tiles")

    # Two simulated seconds standing at spawn lets the start chamber finish fading.
    for _ in range(120):
        sim.tick(FRAME_DT)

    print(f"Discovered {sim.field.discovered_count()} tiles around spawn")
    sim.save_session(project_root / "sessions" / "discovery_snapshot.toml")
    sim.close_session()

if __name__ == "__main__":
    main()
