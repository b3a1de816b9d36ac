"""Lexer and recursive-descent parser for the shell command language.

The grammar covers words, the redirections ``<``, ``>`` and ``>>``,
pipes ``|``, sequencing ``;``, background ``&`` and parenthesised
blocks.
"""

import enum
from dataclasses import dataclass, field
from typing import Iterator, List, NamedTuple, Optional, Union

from .riscv import O_CREATE, O_RDONLY, O_TRUNC, O_WRONLY

MAXARGS = 10

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"

WORD = "word"

_REDIRS = frozenset({"<", ">", ">>"})
_EXEC_STOP = frozenset({"|", ")", "&", ";"})


class ShellSyntaxError(ValueError):
    """A command line could not be parsed."""

    def __init__(self, message, leftovers=None):
        super().__init__(message)
        self.leftovers = leftovers


class RedirMode(enum.IntEnum):
    """Open flags used for each kind of redirection."""

    READ = O_RDONLY
    TRUNCATE = O_WRONLY | O_CREATE | O_TRUNC
    APPEND = O_WRONLY | O_CREATE


@dataclass
class ExecCmd:
    """Run a program with arguments; ``argv[0]`` names the program."""

    argv: List[str] = field(default_factory=list)


@dataclass
class RedirCmd:
    """Run ``cmd`` with descriptor ``fd`` reopened on ``file``."""

    cmd: "Command"
    file: str
    mode: RedirMode
    fd: int


@dataclass
class PipeCmd:
    """Connect the output of ``left`` to the input of ``right``."""

    left: "Command"
    right: "Command"


@dataclass
class ListCmd:
    """Run ``left``, wait for it, then run ``right``."""

    left: "Command"
    right: "Command"


@dataclass
class BackCmd:
    """Run ``cmd`` without waiting for it."""

    cmd: "Command"


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


class Token(NamedTuple):
    """A lexical token: its kind, its text and where it starts."""

    kind: str
    text: str
    start: int


def tokenize(s) -> Iterator[Token]:
    """Yield the tokens of command line ``s``; a NUL ends the line.

    Symbol tokens have their own text as kind; words have kind ``WORD``.
    """
    s = s.split("\0", 1)[0]
    i, n = 0, len(s)
    while True:
        while i < n and s[i] in WHITESPACE:
            i += 1
        if i >= n:
            return
        c = s[i]
        if c == ">" and s[i + 1:i + 2] == ">":
            yield Token(">>", ">>", i)
            i += 2
        elif c in SYMBOLS:
            yield Token(c, c, i)
            i += 1
        else:
            j = i
            while j < n and s[j] not in WHITESPACE and s[j] not in SYMBOLS:
                j += 1
            yield Token(WORD, s[i:j], i)
            i = j


class _Parser:
    def __init__(self, text):
        self.text = text.split("\0", 1)[0]
        self.tokens = list(tokenize(self.text))
        self.pos = 0

    def peek(self, kinds):
        return self.pos < len(self.tokens) and self.tokens[self.pos].kind in kinds

    def next(self) -> Optional[Token]:
        if self.pos >= len(self.tokens):
            return None
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def parse(self):
        cmd = self.line()
        if self.pos < len(self.tokens):
            rest = self.text[self.tokens[self.pos].start:]
            raise ShellSyntaxError("syntax", leftovers=rest)
        return cmd

    def line(self):
        cmd = self.pipe()
        while self.peek({"&"}):
            self.next()
            cmd = BackCmd(cmd)
        if self.peek({";"}):
            self.next()
            cmd = ListCmd(cmd, self.line())
        return cmd

    def pipe(self):
        cmd = self.exec()
        if self.peek({"|"}):
            self.next()
            cmd = PipeCmd(cmd, self.pipe())
        return cmd

    def redirs(self, cmd):
        while self.peek(_REDIRS):
            tok = self.next()
            target = self.next()
            if target is None or target.kind != WORD:
                raise ShellSyntaxError("missing file for redirection")
            if tok.kind == "<":
                cmd = RedirCmd(cmd, target.text, RedirMode.READ, 0)
            elif tok.kind == ">":
                cmd = RedirCmd(cmd, target.text, RedirMode.TRUNCATE, 1)
            else:
                cmd = RedirCmd(cmd, target.text, RedirMode.APPEND, 1)
        return cmd

    def block(self):
        self.next()  # the opening parenthesis
        cmd = self.line()
        if not self.peek({")"}):
            raise ShellSyntaxError("syntax - missing )")
        self.next()
        return self.redirs(cmd)

    def exec(self):
        if self.peek({"("}):
            return self.block()
        node = ExecCmd()
        ret = self.redirs(node)
        while not self.peek(_EXEC_STOP):
            tok = self.next()
            if tok is None:
                break
            if tok.kind != WORD:
                raise ShellSyntaxError("syntax")
            node.argv.append(tok.text)
            if len(node.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            ret = self.redirs(ret)
        return ret


def parse_command(s) -> Command:
    """Parse a whole command line into a command tree."""
    return _Parser(s).parse()