"""
First-Fit Allocator — Occupancy Visualizer

Generates a simple Matplotlib heatmap showing arena occupancy over time.
Garbage-collection passes are marked as horizontal lines.

How to run (recommended, from repo root):
    python -m tools.visualize_fragmentation --trace traces/split_coalesce.jsonl --out out_fragmentation.png
    python -m tools.visualize_fragmentation --ops 400 --drop-prob 0.3 --seed 7

Notes:
- Without --trace a seeded random workload is generated, the same one
  run_sim.py would replay for those options.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script:
# (python -m tools.visualize_fragmentation already works without this,
#  but this makes `python tools/visualize_fragmentation.py ...` work too.)
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import numpy as np
import matplotlib.pyplot as plt

from memory.allocator import Block, FirstFitAllocator
from memory.fragmentation import compute_metrics
from memory.workload import WorkloadRunner, load_trace, random_events


def render_state(blocks: list[Block], capacity: int, width: int) -> np.ndarray:
    """
    Return a 1D occupancy array over the arena, binned to 'width'.
    Each bin holds the fraction of its bytes that are allocated.
    """
    used = np.zeros(capacity, dtype=np.float32)
    for blk in blocks:
        if not blk.free:
            used[blk.address : blk.address + blk.size] = 1.0

    edges = np.linspace(0, capacity, width + 1).astype(int)
    bins = np.zeros(width, dtype=np.float32)
    for i in range(width):
        a, b = edges[i], max(edges[i + 1], edges[i] + 1)
        bins[i] = used[a:min(b, capacity)].mean() if a < capacity else 0.0
    return bins


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--trace", help="Path to JSONL trace (random workload when omitted)")
    ap.add_argument("--out", default="out_fragmentation.png", help="Output image file")
    ap.add_argument("--capacity", type=int, default=1024, help="Arena capacity (bytes)")
    ap.add_argument("--ops", type=int, default=200)
    ap.add_argument("--max-size", type=int, default=100)
    ap.add_argument("--drop-prob", type=float, default=0.2)
    ap.add_argument("--seed", type=int, default=0)
    ap.add_argument("--width", type=int, default=140, help="Heatmap width (bins)")
    ap.add_argument("--every", type=int, default=1, help="Record every N events")
    args = ap.parse_args(argv)

    if args.trace:
        trace_path = Path(args.trace)
        if not trace_path.exists():
            raise SystemExit(f"Trace not found: {trace_path}")
        events = load_trace(str(trace_path))
    else:
        events = random_events(args.ops, args.max_size, 0.7, args.drop_prob, args.seed)

    mem = FirstFitAllocator(args.capacity)
    runner = WorkloadRunner(mem)

    frames: list[np.ndarray] = []
    gc_marks: list[int] = []

    i = 0
    for ev in events:
        i += 1
        runner.apply(ev)
        if ev.get("event") == "gc":
            # mark current frame index (where the line will be drawn)
            gc_marks.append(len(frames))
        if args.every <= 1 or (i % args.every == 0):
            frames.append(render_state(mem.snapshot(), mem.capacity, args.width))

    if not frames:
        raise SystemExit("No frames captured. Check trace path and --every.")

    H = np.stack(frames, axis=0)  # (time, width)

    fig = plt.figure(figsize=(10.5, 4.6))
    ax = fig.add_subplot(111)
    ax.imshow(H, aspect="auto", interpolation="nearest", vmin=0.0, vmax=1.0)
    ax.set_title("Arena Occupancy Heatmap (first-fit)")
    ax.set_xlabel("arena address (binned)")
    ax.set_ylabel("time (frames)")

    for t in gc_marks:
        ax.axhline(t, linewidth=1)

    m = compute_metrics(mem.snapshot())
    caption = (
        f"Final fragmentation: LFE={m.lfe}, holes={m.hole_count}, "
        f"external_frag={m.external_frag:.3f}, entropy={m.entropy:.3f}, "
        f"reclaimed={runner.stats['reclaimed']}"
    )
    fig.text(0.01, 0.01, caption, fontsize=9)

    fig.tight_layout()
    out_path = Path(args.out)
    fig.savefig(str(out_path), dpi=220)
    print(f"Wrote: {out_path.resolve()}")


if __name__ == "__main__":
    main()
