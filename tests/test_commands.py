import io
import os

import pytest

from xvtools import commands
from xvtools.commands import (
    DIRSIZ,
    FileType,
    cat,
    cat_main,
    echo,
    echo_main,
    fmtname,
    kill_main,
    ln_main,
    ls,
    ls_main,
    mkdir_main,
    rm_main,
    wc_counts,
    wc_main,
)


class _ShortWriter:
    def write(self, data):
        return len(data) - 1


def test_cat_copies_across_chunks():
    text = "x" * 1500 + "\nend\n"
    out = io.StringIO()
    cat(io.StringIO(text), out)
    assert out.getvalue() == text


def test_cat_short_write_is_error():
    with pytest.raises(commands.CommandError, match="cat: write error"):
        cat(io.StringIO("hello"), _ShortWriter())


def test_cat_main_files(tmp_path, capsys):
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.write_text("one\n")
    b.write_text("two\n")
    assert cat_main([str(a), str(b)]) == 0
    assert capsys.readouterr().out == "one\ntwo\n"


def test_cat_main_missing(tmp_path, capsys):
    missing = str(tmp_path / "nope")
    assert cat_main([missing]) == 1
    assert capsys.readouterr().err == f"cat: cannot open {missing}\n"


def test_echo_joins_with_spaces():
    out = io.StringIO()
    echo(["hello", "world"], out)
    assert out.getvalue() == "hello world\n"


def test_echo_without_args_writes_nothing(capsys):
    assert echo_main([]) == 0
    assert capsys.readouterr().out == ""


def test_wc_counts_simple():
    assert wc_counts(io.StringIO("hello world\nfoo\n")) == (2, 3, 16)


def test_wc_counts_invariants():
    text = " a\tb\r\nc\vd  \n\n" * 100
    lines, words, chars = wc_counts(io.StringIO(text))
    assert chars == len(text)
    assert lines == text.count("\n")
    assert words == len(text.split())


def test_wc_nul_separates_words():
    assert wc_counts(io.BytesIO(b"ab\0cd"))[1] == 2


def test_wc_empty():
    assert wc_counts(io.StringIO("")) == (0, 0, 0)


def test_wc_main_file(tmp_path, capsys):
    f = tmp_path / "f"
    f.write_bytes(b"a b\nc\n")
    assert wc_main([str(f)]) == 0
    assert capsys.readouterr().out == f"2 3 6 {f}\n"


def test_wc_main_missing(tmp_path, capsys):
    missing = str(tmp_path / "none")
    assert wc_main([missing]) == 1
    assert capsys.readouterr().out == f"wc: cannot open {missing}\n"


def test_fmtname_pads_short_names():
    name = fmtname("user/dir/cat")
    assert len(name) == DIRSIZ
    assert name.rstrip() == "cat"


def test_fmtname_long_name_unchanged():
    long_name = "a" * (DIRSIZ + 3)
    assert fmtname("x/" + long_name) == long_name


def test_ls_file(tmp_path):
    f = tmp_path / "hello"
    f.write_text("abc")
    out, err = io.StringIO(), io.StringIO()
    ls(str(f), out, err)
    name, kind, ino, size = out.getvalue().split()
    assert name == "hello"
    assert int(kind) == FileType.FILE
    assert int(ino) == os.stat(f).st_ino
    assert int(size) == 3
    assert err.getvalue() == ""


def test_ls_directory_lists_entries(tmp_path):
    (tmp_path / "a").write_text("1")
    (tmp_path / "sub").mkdir()
    out, err = io.StringIO(), io.StringIO()
    ls(str(tmp_path), out, err)
    rows = [line.split() for line in out.getvalue().splitlines()]
    names = {row[0]: int(row[1]) for row in rows}
    assert names == {
        ".": FileType.DIR,
        "..": FileType.DIR,
        "a": FileType.FILE,
        "sub": FileType.DIR,
    }


def test_ls_missing(tmp_path):
    missing = str(tmp_path / "gone")
    out, err = io.StringIO(), io.StringIO()
    ls(missing, out, err)
    assert err.getvalue() == f"ls: cannot open {missing}\n"
    assert out.getvalue() == ""


def test_ls_path_too_long(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = "./" * 250 + "."
    out, err = io.StringIO(), io.StringIO()
    ls(path, out, err)
    assert out.getvalue() == "ls: path too long\n"


def test_ls_main_defaults_to_cwd(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "zz").write_text("")
    assert ls_main([]) == 0
    first_fields = [line.split()[0] for line in capsys.readouterr().out.splitlines()]
    assert "zz" in first_fields


def test_kill_usage(capsys):
    assert kill_main([]) == 1
    assert capsys.readouterr().err == "usage: kill pid...\n"


def test_kill_non_numeric_does_nothing():
    assert kill_main(["abc"]) == 0


def test_ln_creates_link(tmp_path):
    old = tmp_path / "old"
    old.write_text("data")
    new = tmp_path / "new"
    assert ln_main([str(old), str(new)]) == 0
    assert new.read_text() == "data"
    assert os.stat(new).st_ino == os.stat(old).st_ino


def test_ln_usage(capsys):
    assert ln_main(["only"]) == 1
    assert capsys.readouterr().err == "Usage: ln old new\n"


def test_ln_failure_reported(tmp_path, capsys):
    old = str(tmp_path / "missing")
    new = str(tmp_path / "new")
    assert ln_main([old, new]) == 0
    assert capsys.readouterr().err == f"link {old} {new}: failed\n"


def test_mkdir_creates_dirs(tmp_path):
    a = tmp_path / "a"
    b = tmp_path / "b"
    assert mkdir_main([str(a), str(b)]) == 0
    assert a.is_dir() and b.is_dir()


def test_mkdir_stops_at_first_failure(tmp_path, capsys):
    existing = tmp_path / "e"
    existing.mkdir()
    later = tmp_path / "later"
    assert mkdir_main([str(existing), str(later)]) == 0
    assert capsys.readouterr().err == f"mkdir: {existing} failed to create\n"
    assert not later.exists()


def test_mkdir_usage(capsys):
    assert mkdir_main([]) == 1
    assert capsys.readouterr().err == "Usage: mkdir files...\n"


def test_rm_removes_files_and_empty_dirs(tmp_path):
    f = tmp_path / "f"
    f.write_text("x")
    d = tmp_path / "d"
    d.mkdir()
    assert rm_main([str(f), str(d)]) == 0
    assert not f.exists() and not d.exists()


def test_rm_refuses_non_empty_dir(tmp_path, capsys):
    d = tmp_path / "d"
    d.mkdir()
    (d / "inner").write_text("x")
    assert rm_main([str(d)]) == 0
    assert capsys.readouterr().err == f"rm: {d} failed to delete\n"
    assert d.is_dir()


def test_rm_usage(capsys):
    assert rm_main([]) == 1
    assert capsys.readouterr().err == "Usage: rm files...\n"