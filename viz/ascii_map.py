from __future__ import annotations
from typing import Iterable, Optional

from memory.allocator import Block

FILLED = '#'
EMPTY = '-'

def render_map(blocks: Iterable[Block], capacity: int, width: Optional[int]=None) -> str:
    """One character per byte, or `width` bins where any allocated byte marks the bin."""
    if width is None:
        return ''.join((EMPTY if b.free else FILLED)*b.size for b in blocks)
    buf = [EMPTY]*width
    for b in blocks:
        if b.free:
            continue
        s = b.address*width // capacity
        e = -(-b.end*width // capacity)
        for i in range(s, min(width, e)):
            buf[i] = FILLED
    return ''.join(buf)

def render_table(blocks: Iterable[Block]) -> str:
    return '\n'.join(f'Address: {b.address}, Size: {b.size}, Status: {b.status}' for b in blocks)

def visualize_memory(blocks: Iterable[Block], capacity: int, width: Optional[int]=None) -> str:
    return (
        "Memory State:\n"
        f"[{render_map(blocks, capacity, width)}]\n"
        f"Legend: {FILLED} = Allocated, {EMPTY} = Free\n"
    )
