from pathlib import Path

import pytest

from gignore.gitignore import IgnoreFilter, compile_file
from gignore.matcher import matches


@pytest.fixture
def repo_dir(tmp_path: Path):
    """
    Create a small project with a .gitignore:
    .
    ├── .gitignore
    ├── build/
    │   └── out.o
    ├── logs/
    │   └── keep.log
    ├── main.py
    └── debug.log
    """
    (tmp_path / ".gitignore").write_bytes(b"# build output\r\n*.log\r\n!logs/keep.log\r\nbuild/\n")
    (tmp_path / ".git").mkdir()
    (tmp_path / "build").mkdir()
    (tmp_path / "build" / "out.o").write_text("obj", encoding="utf-8")
    (tmp_path / "logs").mkdir()
    (tmp_path / "logs" / "keep.log").write_text("keep", encoding="utf-8")
    (tmp_path / "main.py").write_text("print('hi')\n", encoding="utf-8")
    (tmp_path / "debug.log").write_text("noise", encoding="utf-8")
    return tmp_path


def test_compile_file_keeps_line_numbers(repo_dir):
    rule_set = compile_file(repo_dir / ".gitignore")
    assert [rule.pattern for rule in rule_set.rules] == ["*.log", "!logs/keep.log", "build/"]
    assert [rule.line_number for rule in rule_set.rules] == [2, 3, 4]
    assert rule_set.rules[0].source == str(repo_dir / ".gitignore")


def test_compile_file_trims_carriage_returns(repo_dir):
    rule_set = compile_file(repo_dir / ".gitignore")
    assert matches(rule_set, "debug.log")
    assert not matches(rule_set, "logs/keep.log")
    assert matches(rule_set, "build/")
    assert not matches(rule_set, "build")


def test_compile_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        compile_file(tmp_path / "nope")


def test_filter_uses_gitignore(repo_dir):
    should_ignore = IgnoreFilter(repo_dir)
    assert should_ignore(repo_dir / "debug.log")
    assert should_ignore(repo_dir / "build")
    assert should_ignore(repo_dir / "build" / "out.o")
    assert not should_ignore(repo_dir / "logs" / "keep.log")
    assert not should_ignore(repo_dir / "main.py")


def test_filter_accepts_relative_paths(repo_dir):
    should_ignore = IgnoreFilter(repo_dir)
    assert should_ignore("debug.log")
    assert not should_ignore("main.py")


def test_filter_always_skips_git_dir(repo_dir):
    should_ignore = IgnoreFilter(repo_dir)
    assert should_ignore(repo_dir / ".git")
    assert should_ignore(repo_dir / ".git" / "HEAD")


def test_filter_outside_root_and_root_itself(repo_dir, tmp_path_factory):
    should_ignore = IgnoreFilter(repo_dir)
    other = tmp_path_factory.mktemp("other")
    assert not should_ignore(other / "debug.log")
    assert not should_ignore(repo_dir)


def test_filter_without_gitignore(tmp_path):
    (tmp_path / "a.log").write_text("x", encoding="utf-8")
    should_ignore = IgnoreFilter(tmp_path)
    assert should_ignore.rules is None
    assert not should_ignore(tmp_path / "a.log")
