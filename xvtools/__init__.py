"""Page-table, ELF and heap models, a shell parser, grep and file utilities."""

__version__ = "0.1.0"