"""Small file utilities: cat, echo, wc, ls, kill, ln, mkdir and rm."""

import enum
import os
import signal
import stat
import sys

from .ulib import atoi

DIRSIZ = 14
_CHUNK = 512
_PATHBUF = 512
_WC_SPACE = " \r\t\n\v\0"


class CommandError(Exception):
    """A utility failed; the message is what it reports."""


class FileType(enum.IntEnum):
    """Kinds of file that ls reports, with the numbers it prints."""

    DIR = 1
    FILE = 2
    DEVICE = 3


def cat(stream, out):
    """Copy ``stream`` to ``out`` in 512-unit chunks."""
    while True:
        try:
            chunk = stream.read(_CHUNK)
        except OSError as exc:
            raise CommandError("cat: read error") from exc
        if not chunk:
            return
        try:
            written = out.write(chunk)
        except OSError as exc:
            raise CommandError("cat: write error") from exc
        if written is not None and written != len(chunk):
            raise CommandError("cat: write error")


def echo(args, out):
    """Write ``args`` separated by spaces and ended by a newline."""
    if args:
        out.write(" ".join(args) + "\n")


def wc_counts(stream):
    """Return ``(lines, words, characters)`` counted over ``stream``."""
    lines = words = chars = 0
    inword = False
    while True:
        chunk = stream.read(_CHUNK)
        if not chunk:
            break
        if isinstance(chunk, (bytes, bytearray)):
            chunk = chunk.decode("latin-1")
        for c in chunk:
            chars += 1
            if c == "\n":
                lines += 1
            if c in _WC_SPACE:
                inword = False
            elif not inword:
                words += 1
                inword = True
    return lines, words, chars


def fmtname(path):
    """Last component of ``path``, blank-padded to DIRSIZ characters."""
    name = path.rsplit("/", 1)[-1]
    if len(name) >= DIRSIZ:
        return name
    return name.ljust(DIRSIZ)


def _file_type(st):
    if stat.S_ISDIR(st.st_mode):
        return FileType.DIR
    if stat.S_ISREG(st.st_mode):
        return FileType.FILE
    if stat.S_ISCHR(st.st_mode) or stat.S_ISBLK(st.st_mode):
        return FileType.DEVICE
    return None


def _dir_entries(path):
    return [".", ".."] + sorted(os.listdir(path))


def ls(path, out, err):
    """List ``path``: one line for a file, one per entry for a directory."""
    try:
        st = os.stat(path)
    except OSError:
        err.write(f"ls: cannot open {path}\n")
        return
    kind = _file_type(st)
    if kind in (FileType.FILE, FileType.DEVICE):
        out.write(f"{fmtname(path)} {int(kind)} {st.st_ino} {st.st_size}\n")
    elif kind is FileType.DIR:
        if len(path) + 1 + DIRSIZ + 1 > _PATHBUF:
            out.write("ls: path too long\n")
            return
        try:
            names = _dir_entries(path)
        except OSError:
            err.write(f"ls: cannot open {path}\n")
            return
        for name in names:
            full = f"{path}/{name}"
            try:
                est = os.stat(full)
            except OSError:
                out.write(f"ls: cannot stat {full}\n")
                continue
            ekind = _file_type(est)
            code = int(ekind) if ekind is not None else 0
            out.write(f"{fmtname(full)} {code} {est.st_ino} {est.st_size}\n")


def _args(argv):
    return sys.argv[1:] if argv is None else list(argv)


def cat_main(argv=None):
    """Command entry point for cat; returns the exit status."""
    args = _args(argv)
    try:
        if not args:
            cat(sys.stdin, sys.stdout)
            return 0
        for path in args:
            try:
                stream = open(path, newline="")
            except OSError:
                sys.stderr.write(f"cat: cannot open {path}\n")
                return 1
            with stream:
                cat(stream, sys.stdout)
    except CommandError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    return 0


def echo_main(argv=None):
    """Command entry point for echo; returns the exit status."""
    echo(_args(argv), sys.stdout)
    return 0


def _wc_report(stream, name):
    try:
        lines, words, chars = wc_counts(stream)
    except OSError:
        sys.stdout.write("wc: read error\n")
        return False
    sys.stdout.write(f"{lines} {words} {chars} {name}\n")
    return True


def wc_main(argv=None):
    """Command entry point for wc; returns the exit status."""
    args = _args(argv)
    if not args:
        return 0 if _wc_report(sys.stdin, "") else 1
    for path in args:
        try:
            stream = open(path, "rb")
        except OSError:
            sys.stdout.write(f"wc: cannot open {path}\n")
            return 1
        with stream:
            if not _wc_report(stream, path):
                return 1
    return 0


def ls_main(argv=None):
    """Command entry point for ls; returns the exit status."""
    args = _args(argv) or ["."]
    for path in args:
        ls(path, sys.stdout, sys.stderr)
    return 0


def kill_main(argv=None):
    """Command entry point for kill; returns the exit status."""
    args = _args(argv)
    if not args:
        sys.stderr.write("usage: kill pid...\n")
        return 1
    for arg in args:
        pid = atoi(arg)
        if pid <= 0:
            continue  # no process has such an id
        try:
            os.kill(pid, signal.SIGTERM)
        except OSError:
            pass
    return 0


def ln_main(argv=None):
    """Command entry point for ln; returns the exit status."""
    args = _args(argv)
    if len(args) != 2:
        sys.stderr.write("Usage: ln old new\n")
        return 1
    old, new = args
    try:
        os.link(old, new)
    except OSError:
        sys.stderr.write(f"link {old} {new}: failed\n")
    return 0


def mkdir_main(argv=None):
    """Command entry point for mkdir; returns the exit status."""
    args = _args(argv)
    if not args:
        sys.stderr.write("Usage: mkdir files...\n")
        return 1
    for path in args:
        try:
            os.mkdir(path)
        except OSError:
            sys.stderr.write(f"mkdir: {path} failed to create\n")
            break
    return 0


def _unlink(path):
    if os.path.isdir(path) and not os.path.islink(path):
        os.rmdir(path)
    else:
        os.unlink(path)


def rm_main(argv=None):
    """Command entry point for rm; returns the exit status."""
    args = _args(argv)
    if not args:
        sys.stderr.write("Usage: rm files...\n")
        return 1
    for path in args:
        try:
            _unlink(path)
        except OSError:
            sys.stderr.write(f"rm: {path} failed to delete\n")
            break
    return 0