# xvtools

Memory models, file-format records and small user tools from a RISC-V
teaching operating system, as a plain Python package with no third-party
dependencies.

## Modules

- `xvtools.riscv`: Sv39 address arithmetic and the qemu `virt` memory layout.
  Functions `pgroundup`, `pgrounddown`, `pa2pte`, `pte2pa`, `pte_flags`,
  `pxshift`, `px`, `make_satp`, `kstack`, `clint_mtimecmp` and the PLIC
  register helpers (`plic_menable`, `plic_senable`, `plic_mpriority`,
  `plic_spriority`, `plic_mclaim`, `plic_sclaim`). Constants cover the page
  size, PTE bits (`PTE_V`, `PTE_R`, `PTE_W`, `PTE_X`, `PTE_U`), `MAXVA`,
  `KERNBASE`, `PHYSTOP`, `TRAMPOLINE`, `TRAPFRAME` and the open flags
  (`O_RDONLY`, `O_WRONLY`, `O_RDWR`, `O_CREATE`, `O_TRUNC`).
- `xvtools.elf`: little-endian ELF64 records. `ElfHeader` and `ProgramHeader`
  have `from_bytes` and `to_bytes`; `ProgramHeader.is_loadable()` tells
  loadable segments; `program_headers(header, data)` yields the program
  headers of a file image. `ProgFlag` holds the segment permission bits.
  Short input or a bad magic number raises `ElfFormatError`.
- `xvtools.fmt`: a small printf dialect, `%d %l %x %p %s %c %%`.
  `format_printf(fmt, *args)` returns the text; `fprintf(stream, fmt, *args)`
  writes it. Unknown conversions are copied through with their `%`; too few
  arguments raise `TypeError`.
- `xvtools.vm`: `PhysicalMemory` hands out simulated pages (`kalloc`, `kfree`,
  `read`, `write`, `read_pte`, `write_pte`, `free_pages`). `AddressSpace` keeps
  a three-level page table in that memory with `walk`, `walkaddr`,
  `mappages`, `kvmmap`, `unmap`, `load_first`, `grow`, `shrink`, `free`,
  `copy_into`, `clear_user`, `copyout`, `copyin`, `copyinstr` and a `satp`
  property. Failures raise `KernelPanic`, `OutOfMemory` or `BadAddress`.
- `xvtools.umalloc`: `Heap`, a first-fit free-list allocator over a simulated
  program break, with `sbrk`, `malloc`, `free` and `free_units`. Addresses are
  integers; `sbrk` raises `MemoryError` past `limit`.
- `xvtools.shell`: the shell's lexer and parser. `tokenize(s)` yields
  `Token`s; `parse_command(s)` builds a tree of `ExecCmd`, `RedirCmd`,
  `PipeCmd`, `ListCmd` and `BackCmd`. Redirections carry a `RedirMode`.
  Bad input raises `ShellSyntaxError` (with `leftovers` for trailing text).
- `xvtools.grep`: `match(re, text)` supports `^ . * $`; `grep(pattern,
  stream, out)` copies matching newline-terminated lines; `main(argv)` is the
  command.
- `xvtools.ulib`: `atoi`, `strcmp`, `memcmp` and `gets` with C-library
  semantics.
- `xvtools.rand`: the Park–Miller generator, `do_rand(ctx)` and
  `ParkMiller(seed=1).next()`.
- `xvtools.commands`: `cat`, `echo`, `wc_counts`, `fmtname` and `ls`, plus
  command entry points `cat_main`, `echo_main`, `wc_main`, `ls_main`,
  `kill_main`, `ln_main`, `mkdir_main` and `rm_main`. `cat` raises
  `CommandError` on I/O failure; `ls` reports file kinds as `FileType`.

## Install

```
pip install .
```

## Command line

Each command returns its exit status and works on the host's files:

```
xv-echo hello world
xv-cat notes.txt
xv-wc notes.txt
xv-ls .
xv-grep '^ab*c$' notes.txt
xv-ln notes.txt copy.txt
xv-mkdir scratch
xv-rm copy.txt
xv-kill 12345
```

`xv-kill` sends `SIGTERM` to each listed process id.

## Library use

```python
from xvtools.grep import match
from xvtools.shell import parse_command
from xvtools.vm import PhysicalMemory, AddressSpace
from xvtools.riscv import pgroundup

match("^ab*c$", "abbbc")           # True
cmd = parse_command("ls | wc > out")

memory = PhysicalMemory()
space = AddressSpace(memory)
size = space.grow(0, pgroundup(100), 0)
space.copyout(0, b"hello\0")
space.copyinstr(0, 16)             # b"hello"
```

## What it does not do

- There is no kernel, scheduler, process table or file system here; the
  page-table and heap code run over simulated memory only.
- `xvtools.shell` parses command lines but does not run them.
- There is no tool that builds a file-system image.

## Tests

```
pip install .[test]
pytest
```