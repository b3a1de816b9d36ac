"""RISC-V Sv39 paging arithmetic and the qemu ``virt`` machine memory layout."""

# Machine status register fields.
MSTATUS_MPP_MASK = 3 << 11
MSTATUS_MPP_M = 3 << 11
MSTATUS_MPP_S = 1 << 11
MSTATUS_MPP_U = 0 << 11
MSTATUS_MIE = 1 << 3

# Supervisor status register fields.
SSTATUS_SPP = 1 << 8
SSTATUS_SPIE = 1 << 5
SSTATUS_UPIE = 1 << 4
SSTATUS_SIE = 1 << 1
SSTATUS_UIE = 1 << 0

# Supervisor interrupt enable bits.
SIE_SEIE = 1 << 9
SIE_STIE = 1 << 5
SIE_SSIE = 1 << 1

# Machine-mode interrupt enable bits.
MIE_MEIE = 1 << 11
MIE_MTIE = 1 << 7
MIE_MSIE = 1 << 3

SATP_SV39 = 8 << 60

PGSIZE = 4096
PGSHIFT = 12

PTE_V = 1 << 0
PTE_R = 1 << 1
PTE_W = 1 << 2
PTE_X = 1 << 3
PTE_U = 1 << 4

PXMASK = 0x1FF

# One beyond the highest virtual address; one bit short of Sv39's limit
# so that addresses never need sign extension.
MAXVA = 1 << (9 + 9 + 9 + 12 - 1)

_U64 = (1 << 64) - 1

# Physical memory layout of qemu -machine virt.
UART0 = 0x10000000
UART0_IRQ = 10
VIRTIO0 = 0x10001000
VIRTIO0_IRQ = 1
CLINT = 0x2000000
CLINT_MTIME = CLINT + 0xBFF8
PLIC = 0x0C000000
PLIC_PRIORITY = PLIC + 0x0
PLIC_PENDING = PLIC + 0x1000
KERNBASE = 0x80000000
PHYSTOP = KERNBASE + 128 * 1024 * 1024

TRAMPOLINE = MAXVA - PGSIZE
TRAPFRAME = TRAMPOLINE - PGSIZE

# open() mode bits.
O_RDONLY = 0x000
O_WRONLY = 0x001
O_RDWR = 0x002
O_CREATE = 0x200
O_TRUNC = 0x400


def pgroundup(sz):
    """Round ``sz`` up to the next page boundary."""
    return (sz + PGSIZE - 1) & ~(PGSIZE - 1) & _U64


def pgrounddown(a):
    """Round ``a`` down to a page boundary."""
    return a & ~(PGSIZE - 1) & _U64


def pa2pte(pa):
    """Place a physical address in the PPN field of a page-table entry."""
    return ((pa & _U64) >> 12) << 10


def pte2pa(pte):
    """Extract the physical address a page-table entry refers to."""
    return ((pte & _U64) >> 10) << 12


def pte_flags(pte):
    """Return the low ten flag bits of a page-table entry."""
    return pte & 0x3FF


def pxshift(level):
    """Bit position of the page-table index for ``level``."""
    return PGSHIFT + 9 * level


def px(level, va):
    """Return the 9-bit page-table index of ``va`` at ``level``."""
    return ((va & _U64) >> pxshift(level)) & PXMASK


def make_satp(pagetable):
    """Build a satp register value selecting Sv39 with root table ``pagetable``."""
    return SATP_SV39 | ((pagetable & _U64) >> 12)


def kstack(p):
    """Virtual address of the kernel stack for process slot ``p``.

    Each stack sits below the trampoline with an unmapped guard page.
    """
    return TRAMPOLINE - (p + 1) * 2 * PGSIZE


def clint_mtimecmp(hartid):
    """Address of the timer compare register for ``hartid``."""
    return CLINT + 0x4000 + 8 * hartid


def plic_menable(hart):
    """Machine-mode interrupt enable bits of the PLIC for ``hart``."""
    return PLIC + 0x2000 + hart * 0x100


def plic_senable(hart):
    """Supervisor-mode interrupt enable bits of the PLIC for ``hart``."""
    return PLIC + 0x2080 + hart * 0x100


def plic_mpriority(hart):
    """Machine-mode priority threshold of the PLIC for ``hart``."""
    return PLIC + 0x200000 + hart * 0x2000


def plic_spriority(hart):
    """Supervisor-mode priority threshold of the PLIC for ``hart``."""
    return PLIC + 0x201000 + hart * 0x2000


def plic_mclaim(hart):
    """Machine-mode claim register of the PLIC for ``hart``."""
    return PLIC + 0x200004 + hart * 0x2000


def plic_sclaim(hart):
    """Supervisor-mode claim register of the PLIC for ``hart``."""
    return PLIC + 0x201004 + hart * 0x2000