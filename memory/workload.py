from __future__ import annotations
import json
import random
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from memory.allocator import (
    DoubleFreeError, FirstFitAllocator, InvalidAddressError, OutOfMemoryError,
)

DEFAULT_FILL = 0xA5

def load_trace(path: str):
    """Yield JSON events from a JSONL file."""
    with open(path,'r',encoding='utf-8') as f:
        for line in f:
            line=line.strip()
            if line:
                yield json.loads(line)

def random_events(ops: int=50, max_size: int=100, alloc_prob: float=0.7,
                  drop_prob: float=0.0, seed: Optional[int]=None) -> Iterator[dict]:
    """Random allocate/release mix, closed by a single gc event.

    A release picks a random live id; with probability `drop_prob` the owner
    clears and abandons it ('drop') instead of freeing it.
    """
    rng = random.Random(seed)
    live: List[str] = []
    n = 0
    for _ in range(ops):
        if rng.random() < alloc_prob or not live:
            n += 1
            obj = f'o{n}'
            live.append(obj)
            yield {'event': 'alloc', 'id': obj, 'size': rng.randint(1, max_size)}
        else:
            obj = live.pop(rng.randrange(len(live)))
            kind = 'drop' if rng.random() < drop_prob else 'free'
            yield {'event': kind, 'id': obj}
    yield {'event': 'gc'}

class WorkloadRunner:
    """Applies workload events to an allocator on behalf of its owners.

    Live handles map an object id to the (address, size) it was given.
    Allocator errors are counted and reported, never raised.
    """
    def __init__(self, alloc: FirstFitAllocator, log: Optional[Callable[[str], None]]=None):
        self.alloc = alloc
        self.log = log
        self.handles: Dict[str, Tuple[int,int]] = {}
        self.stats = {
            'events':0,'alloc':0,'alloc_fail':0,'free':0,'free_fail':0,
            'drop':0,'skipped':0,'gc':0,'reclaimed':0,
        }

    def _log(self, msg: str):
        if self.log is not None:
            self.log(msg)

    def run(self, events: Iterable[dict]):
        for ev in events:
            self.apply(ev)
        return self.stats

    def apply(self, ev: dict):
        self.stats['events'] += 1
        et = ev.get('event')

        if et=='alloc':
            obj=str(ev['id']); size=int(ev['size'])
            if obj in self.handles:
                self.stats['skipped'] += 1
                return
            # bytes() rejects fills outside 0..255; build it before allocating
            data = bytes([int(ev.get('fill', DEFAULT_FILL))])*size
            try:
                addr = self.alloc.allocate(size)
            except OutOfMemoryError as e:
                self.stats['alloc_fail'] += 1
                self._log(f'Allocation failed: {e}')
                return
            self.alloc.write(addr, data)
            self.handles[obj] = (addr, size)
            self.stats['alloc'] += 1
            self._log(f'Allocated {size} bytes at address {addr}')

        elif et=='free':
            obj=str(ev['id'])
            if obj not in self.handles:
                self.stats['skipped'] += 1
                return
            addr, _ = self.handles[obj]
            try:
                self.alloc.deallocate(addr)
            except (InvalidAddressError, DoubleFreeError) as e:
                self.stats['free_fail'] += 1
                self._log(f'Deallocation failed: {e}')
                return
            del self.handles[obj]
            self.stats['free'] += 1
            self._log(f'Deallocated memory at address {addr}')

        elif et=='drop':
            obj=str(ev['id'])
            if obj not in self.handles:
                self.stats['skipped'] += 1
                return
            addr, size = self.handles.pop(obj)
            self.alloc.write(addr, bytes(size))
            self.stats['drop'] += 1
            self._log(f'Dropped {size} bytes at address {addr} without freeing')

        elif et=='gc':
            reclaimed = self.alloc.garbage_collect()
            self.stats['gc'] += 1
            self.stats['reclaimed'] += reclaimed
            # handles whose block was reclaimed are dead now
            live = {b.address for b in self.alloc.blocks if not b.free}
            for obj in [o for o,(a,_) in self.handles.items() if a not in live]:
                del self.handles[obj]
            self._log(f'Garbage collection freed {reclaimed} bytes')

        elif et=='check':
            self.alloc.check_invariants()

        else:
            raise ValueError(f'unknown event kind: {et!r}')

