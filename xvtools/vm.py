"""Sv39 page tables over a simulated pool of physical pages.

Each page-table page lives in :class:`PhysicalMemory`, and its entries
are encoded exactly as the hardware reads them. That makes the layout of
every table observable through :meth:`PhysicalMemory.read_pte`.
"""

import struct

from .riscv import (
    KERNBASE,
    MAXVA,
    PGSIZE,
    PTE_R,
    PTE_U,
    PTE_V,
    PTE_W,
    PTE_X,
    make_satp,
    pa2pte,
    pgrounddown,
    pgroundup,
    pte2pa,
    pte_flags,
    px,
)

_PTE = struct.Struct("<Q")
_PTES_PER_PAGE = PGSIZE // _PTE.size
_ZERO_PAGE = bytes(PGSIZE)


class KernelPanic(RuntimeError):
    """An invariant of the memory system was broken."""


class OutOfMemory(MemoryError):
    """No free physical page was left."""


class BadAddress(ValueError):
    """A user virtual address is not mapped for user access."""


class PhysicalMemory:
    """A contiguous range of RAM handed out one page at a time."""

    def __init__(self, npages=1024, base=KERNBASE):
        if base % PGSIZE:
            raise ValueError("base must be page aligned")
        if npages <= 0:
            raise ValueError("npages must be positive")
        self.base = base
        self.end = base + npages * PGSIZE
        self._ram = bytearray(npages * PGSIZE)
        # Pages are pushed low to high, so the highest page is handed out first.
        self._free = [base + i * PGSIZE for i in range(npages)]
        self._free_set = set(self._free)

    def _offset(self, pa, n):
        if pa < self.base or pa + n > self.end or n < 0:
            raise KernelPanic(f"physical address {pa:#x} out of range")
        return pa - self.base

    def kalloc(self):
        """Allocate one page and return its physical address.

        The page is filled with junk, as freshly allocated memory is.
        """
        if not self._free:
            raise OutOfMemory("no free physical pages")
        pa = self._free.pop()
        self._free_set.discard(pa)
        off = self._offset(pa, PGSIZE)
        self._ram[off:off + PGSIZE] = b"\x05" * PGSIZE
        return pa

    def kfree(self, pa):
        """Return the page at ``pa`` to the free pool."""
        if pa % PGSIZE or pa < self.base or pa >= self.end:
            raise KernelPanic("kfree")
        if pa in self._free_set:
            raise KernelPanic("kfree: page already free")
        off = self._offset(pa, PGSIZE)
        self._ram[off:off + PGSIZE] = b"\x01" * PGSIZE
        self._free.append(pa)
        self._free_set.add(pa)

    def read(self, pa, n):
        """Return ``n`` bytes starting at physical address ``pa``."""
        off = self._offset(pa, n)
        return bytes(self._ram[off:off + n])

    def write(self, pa, data):
        """Store ``data`` at physical address ``pa``."""
        off = self._offset(pa, len(data))
        self._ram[off:off + len(data)] = data

    def read_pte(self, addr):
        """Read the 64-bit page-table entry stored at ``addr``."""
        return _PTE.unpack(self.read(addr, _PTE.size))[0]

    def write_pte(self, addr, pte):
        """Store a 64-bit page-table entry at ``addr``."""
        self.write(addr, _PTE.pack(pte))

    def free_pages(self):
        """Number of pages currently free."""
        return len(self._free)


class AddressSpace:
    """A three-level Sv39 page table rooted in ``memory``."""

    def __init__(self, memory, root=None):
        self.memory = memory
        if root is None:
            root = memory.kalloc()
            memory.write(root, _ZERO_PAGE)
        self.root = root

    @property
    def satp(self):
        """The satp register value that selects this page table."""
        return make_satp(self.root)

    def walk(self, va, alloc):
        """Return the physical address of the leaf PTE for ``va``.

        Missing page-table pages are created when ``alloc`` is true;
        otherwise ``None`` is returned for them.
        """
        if va >= MAXVA:
            raise KernelPanic("walk")
        mem = self.memory
        table = self.root
        for level in (2, 1):
            pte_addr = table + _PTE.size * px(level, va)
            pte = mem.read_pte(pte_addr)
            if pte & PTE_V:
                table = pte2pa(pte)
            else:
                if not alloc:
                    return None
                table = mem.kalloc()
                mem.write(table, _ZERO_PAGE)
                mem.write_pte(pte_addr, pa2pte(table) | PTE_V)
        return table + _PTE.size * px(0, va)

    def walkaddr(self, va):
        """Physical address of the user page at ``va``, or ``None``."""
        if va >= MAXVA:
            return None
        pte_addr = self.walk(va, False)
        if pte_addr is None:
            return None
        pte = self.memory.read_pte(pte_addr)
        if not pte & PTE_V or not pte & PTE_U:
            return None
        return pte2pa(pte)

    def mappages(self, va, size, pa, perm):
        """Map ``size`` bytes at ``va`` to physical memory starting at ``pa``."""
        if size == 0:
            raise KernelPanic("mappages: size")
        a = pgrounddown(va)
        last = pgrounddown(va + size - 1)
        while True:
            pte_addr = self.walk(a, True)
            if self.memory.read_pte(pte_addr) & PTE_V:
                raise KernelPanic("mappages: remap")
            self.memory.write_pte(pte_addr, pa2pte(pa) | perm | PTE_V)
            if a == last:
                break
            a += PGSIZE
            pa += PGSIZE

    def kvmmap(self, va, pa, sz, perm):
        """Add a mapping that must succeed, as when building a kernel table."""
        try:
            self.mappages(va, sz, pa, perm)
        except OutOfMemory as exc:
            raise KernelPanic("kvmmap") from exc

    def unmap(self, va, npages, do_free):
        """Remove ``npages`` existing mappings from ``va``, optionally freeing them."""
        if va % PGSIZE:
            raise KernelPanic("uvmunmap: not aligned")
        for a in range(va, va + npages * PGSIZE, PGSIZE):
            pte_addr = self.walk(a, False)
            if pte_addr is None:
                raise KernelPanic("uvmunmap: walk")
            pte = self.memory.read_pte(pte_addr)
            if not pte & PTE_V:
                raise KernelPanic("uvmunmap: not mapped")
            if pte_flags(pte) == PTE_V:
                raise KernelPanic("uvmunmap: not a leaf")
            if do_free:
                self.memory.kfree(pte2pa(pte))
            self.memory.write_pte(pte_addr, 0)

    def load_first(self, src):
        """Place ``src`` (shorter than a page) at user address 0."""
        if len(src) >= PGSIZE:
            raise KernelPanic("uvmfirst: more than a page")
        mem = self.memory.kalloc()
        self.memory.write(mem, _ZERO_PAGE)
        self.mappages(0, PGSIZE, mem, PTE_W | PTE_R | PTE_X | PTE_U)
        self.memory.write(mem, bytes(src))

    def grow(self, oldsz, newsz, xperm=0):
        """Allocate zeroed user pages to grow from ``oldsz`` to ``newsz``.

        Returns the new size. On exhaustion the pages added so far are
        released and :class:`OutOfMemory` is raised.
        """
        if newsz < oldsz:
            return oldsz
        oldsz = pgroundup(oldsz)
        for a in range(oldsz, newsz, PGSIZE):
            try:
                mem = self.memory.kalloc()
            except OutOfMemory:
                self.shrink(a, oldsz)
                raise
            self.memory.write(mem, _ZERO_PAGE)
            try:
                self.mappages(a, PGSIZE, mem, PTE_R | PTE_U | xperm)
            except OutOfMemory:
                self.memory.kfree(mem)
                self.shrink(a, oldsz)
                raise
        return newsz

    def shrink(self, oldsz, newsz):
        """Free user pages to bring the size from ``oldsz`` down to ``newsz``."""
        if newsz >= oldsz:
            return oldsz
        if pgroundup(newsz) < pgroundup(oldsz):
            npages = (pgroundup(oldsz) - pgroundup(newsz)) // PGSIZE
            self.unmap(pgroundup(newsz), npages, True)
        return newsz

    def _freewalk(self, table):
        entries = self.memory.read(table, PGSIZE)
        for i, (pte,) in enumerate(_PTE.iter_unpack(entries)):
            if pte & PTE_V and not pte & (PTE_R | PTE_W | PTE_X):
                self._freewalk(pte2pa(pte))
                self.memory.write_pte(table + i * _PTE.size, 0)
            elif pte & PTE_V:
                raise KernelPanic("freewalk: leaf")
        self.memory.kfree(table)

    def free(self, sz):
        """Free ``sz`` bytes of user memory, then every page-table page."""
        if sz > 0:
            self.unmap(0, pgroundup(sz) // PGSIZE, True)
        self._freewalk(self.root)
        self.root = None

    def copy_into(self, other, sz):
        """Copy the first ``sz`` bytes of memory and mappings into ``other``.

        On exhaustion, whatever was copied is freed from ``other`` and
        :class:`OutOfMemory` is raised.
        """
        i = 0
        try:
            for i in range(0, sz, PGSIZE):
                pte_addr = self.walk(i, False)
                if pte_addr is None:
                    raise KernelPanic("uvmcopy: pte should exist")
                pte = self.memory.read_pte(pte_addr)
                if not pte & PTE_V:
                    raise KernelPanic("uvmcopy: page not present")
                pa = pte2pa(pte)
                flags = pte_flags(pte)
                mem = other.memory.kalloc()
                other.memory.write(mem, self.memory.read(pa, PGSIZE))
                try:
                    other.mappages(i, PGSIZE, mem, flags)
                except OutOfMemory:
                    other.memory.kfree(mem)
                    raise
        except OutOfMemory:
            other.unmap(0, i // PGSIZE, True)
            raise

    def clear_user(self, va):
        """Remove user access from the page at ``va``."""
        pte_addr = self.walk(va, False)
        if pte_addr is None:
            raise KernelPanic("uvmclear")
        self.memory.write_pte(pte_addr, self.memory.read_pte(pte_addr) & ~PTE_U)

    def _user_chunks(self, va, length):
        """Yield (physical address, count) pieces covering a user range."""
        while length > 0:
            va0 = pgrounddown(va)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise BadAddress(f"user address {va:#x} not mapped")
            n = min(PGSIZE - (va - va0), length)
            yield pa0 + (va - va0), n
            length -= n
            va = va0 + PGSIZE

    def copyout(self, dstva, data):
        """Copy ``data`` from the kernel to user address ``dstva``."""
        data = bytes(data)
        pos = 0
        for pa, n in self._user_chunks(dstva, len(data)):
            self.memory.write(pa, data[pos:pos + n])
            pos += n

    def copyin(self, srcva, n):
        """Return ``n`` bytes read from user address ``srcva``."""
        return b"".join(
            self.memory.read(pa, count) for pa, count in self._user_chunks(srcva, n)
        )

    def copyinstr(self, srcva, max):
        """Read a NUL-terminated string of at most ``max`` bytes from user space.

        The terminating NUL is not included in the result.
        """
        out = bytearray()
        while max > 0:
            va0 = pgrounddown(srcva)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise BadAddress(f"user address {srcva:#x} not mapped")
            n = min(PGSIZE - (srcva - va0), max)
            chunk = self.memory.read(pa0 + (srcva - va0), n)
            end = chunk.find(b"\0")
            if end >= 0:
                out += chunk[:end]
                return bytes(out)
            out += chunk
            max -= n
            srcva = va0 + PGSIZE
        raise BadAddress("string not terminated within limit")