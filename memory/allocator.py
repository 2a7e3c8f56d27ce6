from __future__ import annotations
from dataclasses import dataclass, replace
from typing import List, Tuple

class AllocatorError(Exception):
    pass

class OutOfMemoryError(AllocatorError):
    """No free block large enough for the request."""

class InvalidAddressError(AllocatorError):
    """Address does not start any block (or a span leaves the arena)."""

class DoubleFreeError(AllocatorError):
    """Block at the address is already free."""

@dataclass
class Block:
    address: int
    size: int
    free: bool = True

    @property
    def end(self) -> int:
        return self.address + self.size

    @property
    def status(self) -> str:
        return 'Free' if self.free else 'Allocated'

def _positive_int(n) -> bool:
    return isinstance(n, int) and not isinstance(n, bool) and n > 0

class FirstFitAllocator:
    """First-fit allocator over a fixed-size byte arena.

    ``blocks`` partitions ``[0, capacity)`` in address order with no gaps,
    and no two neighbours are both free. Only allocate, deallocate and
    garbage_collect mutate it.
    """
    def __init__(self, capacity: int):
        if not _positive_int(capacity):
            raise ValueError(f'capacity must be a positive integer, got {capacity!r}')
        self.capacity = capacity
        self.arena = bytearray(capacity)
        self.blocks: List[Block] = [Block(0, capacity, True)]

    def allocate(self, size: int) -> int:
        if not _positive_int(size):
            raise ValueError(f'size must be a positive integer, got {size!r}')
        for i, b in enumerate(self.blocks):
            if b.free and b.size >= size:
                if b.size > size:
                    self.blocks.insert(i+1, Block(b.address+size, b.size-size, True))
                    b.size = size
                b.free = False
                return b.address
        raise OutOfMemoryError(f'no free block large enough for {size} bytes '
                               f'(largest free extent {self.largest_free_extent()})')

    def deallocate(self, address: int):
        for i, b in enumerate(self.blocks):
            if b.address == address:
                if b.free:
                    raise DoubleFreeError(f'block at address {address} is already free')
                b.free = True
                self._coalesce(i)
                return
            if b.address > address:
                break
        raise InvalidAddressError(f'no block starts at address {address}')

    def _coalesce(self, i: int):
        # right first: the left check must see the merged size
        blocks = self.blocks
        if i+1 < len(blocks) and blocks[i+1].free:
            blocks[i].size += blocks[i+1].size
            del blocks[i+1]
        if i > 0 and blocks[i-1].free:
            blocks[i-1].size += blocks[i].size
            del blocks[i]

    def _coalesce_all(self):
        merged: List[Block] = []
        for b in self.blocks:
            if merged and merged[-1].free and b.free:
                merged[-1].size += b.size
            else:
                merged.append(b)
        self.blocks = merged

    def garbage_collect(self) -> int:
        """Reclaim used blocks whose first arena byte is zero.

        The zero byte stands in for "contents cleared by the owner"; there is
        no reachability analysis. Reclaimed blocks are merged with free
        neighbours before returning. Returns the bytes reclaimed.
        """
        reclaimed = 0
        for b in self.blocks:
            if not b.free and self.arena[b.address] == 0:
                b.free = True
                reclaimed += b.size
        if reclaimed:
            self._coalesce_all()
        return reclaimed

    def snapshot(self) -> List[Block]:
        return [replace(b) for b in self.blocks]

    get_blocks = snapshot

    def write(self, address: int, data: bytes):
        self._check_span(address, len(data))
        self.arena[address:address+len(data)] = data

    def read(self, address: int, size: int) -> bytes:
        self._check_span(address, size)
        return bytes(self.arena[address:address+size])

    def _check_span(self, address: int, size: int):
        if address < 0 or size < 0 or address + size > self.capacity:
            raise InvalidAddressError(
                f'span [{address}, {address+size}) outside arena [0, {self.capacity})')

    def used(self) -> int:
        return sum(b.size for b in self.blocks if not b.free)

    def free_bytes(self) -> int:
        return self.capacity - self.used()

    def extents_free(self) -> List[Tuple[int,int]]:
        return [(b.address, b.size) for b in self.blocks if b.free]

    def largest_free_extent(self) -> int:
        return max((s for _,s in self.extents_free()), default=0)

    def check_invariants(self):
        blocks = self.blocks
        if not blocks:
            raise AssertionError('block list is empty')
        if blocks[0].address != 0:
            raise AssertionError(f'first block starts at {blocks[0].address}')
        for b in blocks:
            if b.size <= 0:
                raise AssertionError(f'zero-sized block at {b.address}')
        for a, b in zip(blocks, blocks[1:]):
            if a.end != b.address:
                raise AssertionError(f'gap or overlap between {a} and {b}')
            if a.free and b.free:
                raise AssertionError(f'adjacent free blocks {a} and {b}')
        if blocks[-1].end != self.capacity:
            raise AssertionError(f'blocks end at {blocks[-1].end}, arena is {self.capacity}')

    def __str__(self) -> str:
        return '\n'.join(f'Address: {b.address}, Size: {b.size}, Status: {b.status}'
                         for b in self.blocks)
