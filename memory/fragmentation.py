from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List
import math

from memory.allocator import Block

@dataclass
class FragMetrics:
    total_free: int
    used: int
    lfe: int
    external_frag: float
    entropy: float
    hole_count: int

def _entropy(ext_sizes: List[int]) -> float:
    total = sum(ext_sizes)
    if total <= 0:
        return 0.0
    ps = [s/total for s in ext_sizes if s>0]
    return -sum(p*math.log(p, 2) for p in ps)

def compute_metrics(blocks: Iterable[Block]) -> FragMetrics:
    """Fragmentation of a block snapshot.

    external_frag is 1 - largest_free/total_free: 0.0 when all free space is
    one extent (or there is none), approaching 1.0 as it splinters.
    """
    blocks = list(blocks)
    sizes = [b.size for b in blocks if b.free]
    used = sum(b.size for b in blocks if not b.free)
    total_free = sum(sizes)
    lfe = max(sizes, default=0)
    external = 0.0 if total_free==0 else 1.0 - (lfe/total_free)
    return FragMetrics(total_free, used, lfe, external, _entropy(sizes), len(sizes))
