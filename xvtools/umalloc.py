"""A first-fit free-list allocator over a simulated program break.

Blocks are measured in header-sized units; the free list is circular,
kept in address order, and neighbouring free blocks are merged.
Addresses are plain integers.
"""

from dataclasses import dataclass
from typing import Optional

_MIN_CORE_UNITS = 4096


@dataclass
class _Header:
    ptr: Optional[int]
    size: int


class Heap:
    """An allocator that grows its arena through :meth:`sbrk`."""

    HEADER_SIZE = 16
    _BASE = 0  # address of the zero-sized list anchor, below any heap block

    def __init__(self, start=0x1000, limit=None):
        if start <= self._BASE or start % self.HEADER_SIZE:
            raise ValueError("start must be a positive multiple of the header size")
        if limit is not None and limit < start:
            raise ValueError("limit lies below start")
        self.start = start
        self.limit = limit
        self.brk = start
        self._headers = {}
        self._allocated = set()
        self._freep = None

    def sbrk(self, n):
        """Move the break by ``n`` bytes and return the old break."""
        new = self.brk + n
        if new < self.start or (self.limit is not None and new > self.limit):
            raise MemoryError(f"cannot move break by {n}")
        old = self.brk
        self.brk = new
        return old

    def _morecore(self, nunits):
        nunits = max(nunits, _MIN_CORE_UNITS)
        hp = self.sbrk(nunits * self.HEADER_SIZE)
        self._headers[hp] = _Header(None, nunits)
        self._release(hp + self.HEADER_SIZE)
        return self._freep

    def malloc(self, nbytes):
        """Allocate ``nbytes`` and return the address of the usable area."""
        if nbytes < 0:
            raise ValueError("nbytes must not be negative")
        h = self._headers
        hs = self.HEADER_SIZE
        nunits = (nbytes + hs - 1) // hs + 1
        if self._freep is None:
            h[self._BASE] = _Header(self._BASE, 0)
            self._freep = self._BASE
        prevp = self._freep
        p = h[prevp].ptr
        while True:
            block = h[p]
            if block.size >= nunits:
                if block.size == nunits:
                    h[prevp].ptr = block.ptr
                else:
                    block.size -= nunits
                    p += block.size * hs
                    h[p] = _Header(None, nunits)
                self._freep = prevp
                self._allocated.add(p)
                return p + hs
            if p == self._freep:
                p = self._morecore(nunits)
            prevp = p
            p = h[p].ptr

    def free(self, ap):
        """Return the block at ``ap``, which :meth:`malloc` handed out."""
        bp = ap - self.HEADER_SIZE
        if bp not in self._allocated:
            raise ValueError(f"{ap:#x} is not an allocated block")
        self._allocated.discard(bp)
        self._release(ap)

    def _release(self, ap):
        h = self._headers
        hs = self.HEADER_SIZE
        bp = ap - hs
        p = self._freep
        while not (p < bp < h[p].ptr):
            nxt = h[p].ptr
            if p >= nxt and (bp > p or bp < nxt):
                break
            p = nxt
        block = h[bp]
        nxt = h[p].ptr
        if bp + block.size * hs == nxt:
            block.size += h[nxt].size
            block.ptr = h[nxt].ptr
            del h[nxt]
        else:
            block.ptr = nxt
        prev = h[p]
        if p + prev.size * hs == bp:
            prev.size += block.size
            prev.ptr = block.ptr
            del h[bp]
        else:
            prev.ptr = bp
        self._freep = p

    def free_units(self):
        """Total size, in header units, of the blocks on the free list."""
        if self._freep is None:
            return 0
        total = 0
        p = self._headers[self._freep].ptr
        while True:
            total += self._headers[p].size
            if p == self._freep:
                return total
            p = self._headers[p].ptr