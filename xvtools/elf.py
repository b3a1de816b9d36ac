"""ELF64 file and program header records, little endian."""

import enum
import struct
from dataclasses import dataclass
from typing import ClassVar, Iterator

ELF_MAGIC = 0x464C457F  # "\x7FELF" read as a little-endian word

ELF_PROG_LOAD = 1


class ProgFlag(enum.IntFlag):
    """Permission bits of a program header."""

    EXEC = 1
    WRITE = 2
    READ = 4


ELF_PROG_FLAG_EXEC = ProgFlag.EXEC
ELF_PROG_FLAG_WRITE = ProgFlag.WRITE
ELF_PROG_FLAG_READ = ProgFlag.READ


class ElfFormatError(ValueError):
    """Raised when bytes do not hold a well-formed ELF record."""


@dataclass(frozen=True)
class ElfHeader:
    """The ELF file header."""

    magic: int = ELF_MAGIC
    elf: bytes = bytes(12)
    type: int = 0
    machine: int = 0
    version: int = 0
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = 0
    phentsize: int = 0
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<I12sHHIQQQIHHHHHH")
    SIZE: ClassVar[int] = FORMAT.size

    @classmethod
    def from_bytes(cls, data):
        """Parse a header from the start of ``data``; the magic must match."""
        if len(data) < cls.SIZE:
            raise ElfFormatError(
                f"ELF header needs {cls.SIZE} bytes, got {len(data)}"
            )
        header = cls(*cls.FORMAT.unpack_from(data))
        if header.magic != ELF_MAGIC:
            raise ElfFormatError(f"bad ELF magic {header.magic:#x}")
        return header

    def to_bytes(self):
        """Serialise the header."""
        if len(self.elf) != 12:
            raise ElfFormatError("ident field must be 12 bytes")
        return self.FORMAT.pack(
            self.magic,
            self.elf,
            self.type,
            self.machine,
            self.version,
            self.entry,
            self.phoff,
            self.shoff,
            self.flags,
            self.ehsize,
            self.phentsize,
            self.phnum,
            self.shentsize,
            self.shnum,
            self.shstrndx,
        )


@dataclass(frozen=True)
class ProgramHeader:
    """One program section header."""

    type: int = 0
    flags: int = 0
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    align: int = 0

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<IIQQQQQQ")
    SIZE: ClassVar[int] = FORMAT.size

    @classmethod
    def from_bytes(cls, data):
        """Parse a program header from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ElfFormatError(
                f"program header needs {cls.SIZE} bytes, got {len(data)}"
            )
        return cls(*cls.FORMAT.unpack_from(data))

    def to_bytes(self):
        """Serialise the program header."""
        return self.FORMAT.pack(
            self.type,
            self.flags,
            self.off,
            self.vaddr,
            self.paddr,
            self.filesz,
            self.memsz,
            self.align,
        )

    def is_loadable(self):
        """True when this section is to be loaded into memory."""
        return self.type == ELF_PROG_LOAD


def program_headers(header, data) -> Iterator[ProgramHeader]:
    """Yield the ``header.phnum`` program headers found in file image ``data``."""
    for i in range(header.phnum):
        off = header.phoff + i * ProgramHeader.SIZE
        chunk = data[off:off + ProgramHeader.SIZE]
        if len(chunk) < ProgramHeader.SIZE:
            raise ElfFormatError(f"program header {i} lies beyond end of file")
        yield ProgramHeader.from_bytes(chunk)