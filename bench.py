from __future__ import annotations
import subprocess
import sys
import re

PY = sys.executable  # respects venv if activated, otherwise uses current python

# (capacity, ops, drop_prob, seed)
SCENARIOS = [
    (1024, 50, 0.0, 1),
    (1024, 50, 0.0, 2),
    (1024, 200, 0.0, 1),
    (1024, 200, 0.3, 1),
    (512, 200, 0.3, 2),
    (4096, 500, 0.2, 3),
]

PATTERNS = {
    "alloc": re.compile(r"Allocations:\s+(\d+)"),
    "alloc_fail": re.compile(r"Alloc failures:\s+(\d+)"),
    "free_fail": re.compile(r"Free failures:\s+(\d+)"),
    "reclaimed": re.compile(r"Reclaimed:\s+(\d+)"),
    "used": re.compile(r"Used:\s+(\d+)"),
    "lfe": re.compile(r"Fragmentation: LFE=(\d+)"),
    "holes": re.compile(r"holes=(\d+)"),
    "external_frag": re.compile(r"external_frag=([0-9\.]+)"),
}

def run(capacity: int, ops: int, drop: float, seed: int) -> str:
    cmd = [PY, "run_sim.py", "--capacity", str(capacity), "--ops", str(ops),
           "--drop-prob", str(drop), "--seed", str(seed), "--check"]
    out = subprocess.check_output(cmd, stderr=subprocess.STDOUT, text=True)
    return out

def parse(out: str):
    def get(key, default=None):
        m = PATTERNS[key].search(out)
        return m.group(1) if m else default
    return {
        "alloc": int(get("alloc", 0)),
        "alloc_fail": int(get("alloc_fail", 0)),
        "free_fail": int(get("free_fail", 0)),
        "reclaimed": int(get("reclaimed", 0)),
        "used": int(get("used", 0)),
        "lfe": int(get("lfe", 0)),
        "holes": int(get("holes", 0)),
        "external_frag": float(get("external_frag", 0.0)),
    }

def main():
    rows=[]
    for capacity, ops, drop, seed in SCENARIOS:
        out = run(capacity, ops, drop, seed)
        rows.append((capacity, ops, drop, seed, parse(out)))

    header = ["capacity","ops","drop","seed","allocs","oom","bad_free","reclaimed","used","LFE","holes","ext_frag"]
    print("="*110)
    print("First-Fit Allocator — Benchmark Table (random workloads)")
    print("="*110)
    print("{:>8} {:>5} {:>5} {:>5} {:>7} {:>5} {:>9} {:>10} {:>6} {:>6} {:>6} {:>9}".format(*header))
    for capacity, ops, drop, seed, m in rows:
        print("{:>8} {:>5} {:>5.2f} {:>5} {:>7} {:>5} {:>9} {:>10} {:>6} {:>6} {:>6} {:>9.3f}".format(
            capacity, ops, drop, seed, m["alloc"], m["alloc_fail"], m["free_fail"], m["reclaimed"],
            m["used"], m["lfe"], m["holes"], m["external_frag"]
        ))
    print("="*110)
    print("Tip: replay a trace with --show-map for the final block table and memory map.")
    print("  python run_sim.py --trace traces/split_coalesce.jsonl --show-map --verbose")

if __name__ == "__main__":
    main()
