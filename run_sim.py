from __future__ import annotations
import argparse
from pathlib import Path
from memory.allocator import FirstFitAllocator
from memory.fragmentation import compute_metrics
from memory.workload import WorkloadRunner, load_trace, random_events
from viz.ascii_map import render_table, visualize_memory

def main(argv=None):
    ap=argparse.ArgumentParser(description="First-fit arena allocator simulator")
    ap.add_argument('--trace', help="JSONL trace to replay; a random workload is generated when omitted")
    ap.add_argument('--capacity', type=int, default=1024)
    ap.add_argument('--ops', type=int, default=50, help="Random workload: number of operations")
    ap.add_argument('--max-size', type=int, default=100, help="Random workload: largest request (bytes)")
    ap.add_argument('--alloc-prob', type=float, default=0.7)
    ap.add_argument('--drop-prob', type=float, default=0.0,
                    help="Chance a release clears and abandons the block instead of freeing it "
                         "(left for the garbage collector).")
    ap.add_argument('--seed', type=int, default=None)
    ap.add_argument('--width', type=int, default=None, help="Bin the memory map to this many columns")
    ap.add_argument('--show-map', action='store_true')
    ap.add_argument('--verbose', action='store_true', help="Print every operation outcome")
    ap.add_argument('--check', action='store_true', help="Verify block invariants after every event")
    args=ap.parse_args(argv)

    if args.trace:
        trace_path = Path(args.trace)
        if not trace_path.exists():
            raise SystemExit(f"Trace not found: {trace_path}")
        events = load_trace(str(trace_path))
    else:
        events = random_events(args.ops, args.max_size, args.alloc_prob, args.drop_prob, args.seed)

    mem=FirstFitAllocator(args.capacity)
    runner=WorkloadRunner(mem, log=print if args.verbose else None)
    for ev in events:
        runner.apply(ev)
        if args.check:
            mem.check_invariants()
    stats=runner.stats

    m=compute_metrics(mem.snapshot())
    print("="*72)
    print("First-Fit Allocator — Simulator Summary")
    print("="*72)
    print(f"Workload: {args.trace or 'random'}   Seed: {args.seed}   Events: {stats['events']}")
    print(f"Capacity: {mem.capacity}  Used: {mem.used()}  Free: {mem.free_bytes()}  Blocks: {len(mem.blocks)}")
    print(f"Allocations: {stats['alloc']}  Frees: {stats['free']}  Drops: {stats['drop']}  Skipped: {stats['skipped']}")
    print(f"Alloc failures: {stats['alloc_fail']}  Free failures: {stats['free_fail']}")
    print(f"GC passes: {stats['gc']}  Reclaimed: {stats['reclaimed']}")
    print("-"*72)
    print(f"Fragmentation: LFE={m.lfe} holes={m.hole_count} external_frag={m.external_frag:.3f} entropy={m.entropy:.3f}")
    if args.show_map:
        print("-"*72)
        print("Final Memory State:")
        print(render_table(mem.snapshot()))
        print(visualize_memory(mem.snapshot(), mem.capacity, args.width), end='')
    print("="*72)
    return stats

if __name__=='__main__':
    main()
