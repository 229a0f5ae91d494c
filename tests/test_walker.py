#!/usr/bin/env python3
"""
Unit tests for the tree walker.
"""

import logging
import os
import sys
import threading
import pytest
from xparse_ignore.types import Importance, RootError
from xparse_ignore.walker import TreeWalker, walk_tree


def by_path(entries):
    return {e.relative_path: e for e in entries}


def kept_paths(entries):
    return [e.relative_path for e in entries if e.kept]


def test_rule_file_in_subdirectory(make_tree):
    """A rule file applies to its own directory and keeps itself."""
    root = make_tree(
        {
            "a/.gitignore": "secret.txt\n",
            "a/secret.txt": "s",
            "a/keep.txt": "k",
        }
    )
    entries = walk_tree(root)

    assert kept_paths(entries) == ["a", "a/.gitignore", "a/keep.txt"]
    secret = by_path(entries)["a/secret.txt"]
    assert secret.ignored
    assert secret.ignored_by == ("secret.txt",)
    assert by_path(entries)["a/.gitignore"].important is Importance.BUILTIN


def test_builtin_directory_is_pruned(make_tree):
    root = make_tree({"node_modules/pkg/index.js": "x", "index.js": "y"})
    entries = walk_tree(root)

    assert [e.relative_path for e in entries] == ["index.js", "node_modules"]
    modules = by_path(entries)["node_modules"]
    assert modules.ignored
    assert modules.ignored_by == ()
    assert not modules.kept


def test_anchored_pattern(make_tree):
    """Test that /build only matches at the root."""
    root = make_tree(
        {
            ".gitignore": "/build\n",
            "build/out.o": "",
            "sub/build/out.o": "",
        }
    )
    entries = by_path(walk_tree(root))

    assert entries["build"].ignored
    assert "build/out.o" not in entries
    assert not entries["sub/build"].ignored
    assert "sub/build/out.o" in entries


def test_unanchored_pattern(make_tree):
    root = make_tree(
        {
            ".gitignore": "build\n",
            "build/out.o": "",
            "sub/build/out.o": "",
        }
    )
    entries = by_path(walk_tree(root))

    assert entries["build"].ignored
    assert entries["sub/build"].ignored
    assert "sub/build/out.o" not in entries


@pytest.mark.parametrize(
    "rules,kept",
    [
        ("*.tmp\n!keep.tmp\n", True),
        ("!keep.tmp\n*.tmp\n", False),
    ],
)
def test_negation_order(make_tree, rules, kept):
    root = make_tree({".gitignore": rules, "keep.tmp": "", "drop.tmp": ""})
    entries = by_path(walk_tree(root))

    assert entries["keep.tmp"].kept == kept
    assert not entries["drop.tmp"].kept
    if kept:
        assert entries["keep.tmp"].important is Importance.NEGATED_RULE


def test_directory_only_pattern(make_tree):
    """Test that dist/ does not match a file named dist."""
    root = make_tree({".gitignore": "dist/\n", "dist": "file", "pkg/dist/x.js": ""})
    entries = by_path(walk_tree(root))

    assert entries["dist"].kept
    assert not entries["pkg/dist"].kept
    assert "pkg/dist/x.js" not in entries


def test_pruning_beats_later_negation(make_tree):
    """Descendants of an ignored directory are never visited."""
    root = make_tree(
        {
            ".gitignore": "logs/\n!logs/keep.txt\n",
            "logs/keep.txt": "",
            "logs/other.txt": "",
        }
    )
    entries = walk_tree(root)

    assert [e.relative_path for e in entries] == [".gitignore", "logs"]


def test_negation_overrides_builtin(make_tree):
    root = make_tree({".gitignore": "!yarn.lock\n", "yarn.lock": "", "npm-debug.log": ""})
    entries = by_path(walk_tree(root))

    assert entries["yarn.lock"].kept
    assert entries["yarn.lock"].ignored
    assert entries["yarn.lock"].important is Importance.NEGATED_RULE
    assert not entries["npm-debug.log"].kept


def test_negated_directory_keeps_its_subtree(make_tree):
    """Importance set on a directory is inherited by everything below it."""
    root = make_tree(
        {
            ".gitignore": "*.tmp\n!cache/\n",
            "cache/.gitignore": "*\n",
            "cache/x.tmp": "",
            "cache/deep/y.tmp": "",
            "other.tmp": "",
        }
    )
    entries = by_path(walk_tree(root))

    assert entries["cache"].important is Importance.NEGATED_RULE
    for path in ("cache/x.tmp", "cache/deep", "cache/deep/y.tmp"):
        assert entries[path].ignored
        assert entries[path].important is Importance.INHERITED
        assert entries[path].kept
    assert not entries["other.tmp"].kept


def test_pinned_directory_is_walked(make_tree):
    root = make_tree(
        {
            ".gitignore": "pinned.xx/\n*.bin\n",
            "pinned.xx/data.bin": "",
            "data.bin": "",
        }
    )
    entries = by_path(walk_tree(root))

    assert entries["pinned.xx"].ignored
    assert entries["pinned.xx"].important is Importance.BUILTIN
    assert entries["pinned.xx/data.bin"].important is Importance.INHERITED
    assert not entries["data.bin"].kept


def test_vendor_with_manifest_is_pruned(make_tree):
    root = make_tree(
        {
            "composer.json": "{}",
            "vendor/lib/a.php": "",
            "app/vendor/b.php": "",
        }
    )
    entries = by_path(walk_tree(root))

    assert not entries["vendor"].kept
    assert "vendor/lib" not in entries
    assert entries["app/vendor"].kept
    assert "app/vendor/b.php" in entries


def test_keep_and_ignore_partition(make_tree):
    """Every entry is either kept or ignored, never both."""
    root = make_tree(
        {
            ".gitignore": "*.o\n!main.o\nbuild/\n",
            "main.o": "",
            "util.o": "",
            "build/x": "",
            "notes.xx": "",
            "src/a.c": "",
            "src/.gitignore": "*.c\n",
        }
    )
    entries = walk_tree(root)
    for entry in entries:
        ignored = entry.ignored and entry.important is Importance.NONE
        assert entry.kept != ignored


def test_walk_order(make_tree):
    """Children of a directory come before any grandchild."""
    root = make_tree(
        {
            "a/one.txt": "",
            "a/sub/deep.txt": "",
            "b.txt": "",
            "c/two.txt": "",
        }
    )
    entries = walk_tree(root)

    assert [e.relative_path for e in entries] == [
        "a",
        "b.txt",
        "c",
        "a/one.txt",
        "a/sub",
        "a/sub/deep.txt",
        "c/two.txt",
    ]


def test_walk_is_idempotent(make_tree):
    root = make_tree({".gitignore": "*.log\n", "a/b/c.txt": "", "a/x.log": ""})
    first = walk_tree(root)
    second = walk_tree(root)
    assert first == second


def test_entry_paths(make_tree):
    root = make_tree({"a/b.txt": ""})
    entry = by_path(walk_tree(root))["a/b.txt"]

    assert entry.basename == "b.txt"
    assert entry.absolute_path == f"{root.resolve().as_posix()}/a/b.txt"
    assert not entry.is_directory
    assert entry.error is None


def test_invalid_root(tmp_path):
    with pytest.raises(RootError):
        walk_tree(tmp_path / "missing")

    file_path = tmp_path / "file.txt"
    file_path.write_text("")
    with pytest.raises(RootError):
        walk_tree(file_path)

    with pytest.raises(RootError):
        walk_tree("  ")


def test_unreadable_directory(memory_fs, caplog):
    """A listing failure is recorded on the directory and its siblings go on."""
    fs = memory_fs(
        {
            "/r/locked/inner.txt": "",
            "/r/open/file.txt": "",
            "/r/top.txt": "",
        },
        fail={"/r/locked"},
    )
    with caplog.at_level(logging.WARNING, logger="xparse_ignore"):
        entries = by_path(walk_tree("/r", fs=fs))

    assert "Permission denied" in entries["locked"].error
    assert entries["locked"].kept
    assert "locked/inner.txt" not in entries
    assert "open/file.txt" in entries
    assert "top.txt" in entries
    assert "Cannot list directory" in caplog.text


def test_unlistable_root(memory_fs):
    fs = memory_fs({"/r/a.txt": ""}, fail={"/r"})
    with pytest.raises(RootError):
        walk_tree("/r", fs=fs)


def test_ignored_directory_is_never_listed(memory_fs):
    fs = memory_fs(
        {
            "/r/.gitignore": "tmp/\n",
            "/r/tmp/a/b/c.txt": "",
            "/r/src/main.py": "",
        }
    )
    walk_tree("/r", fs=fs)
    assert fs.listed == ["/r", "/r/src"]


def test_bad_rule_does_not_stop_walk(make_tree, caplog):
    root = make_tree({".gitignore": "!\n*.tmp\n", "a.tmp": "", "b.txt": ""})
    with caplog.at_level(logging.WARNING, logger="xparse_ignore"):
        entries = by_path(walk_tree(root))

    assert not entries["a.tmp"].kept
    assert entries["b.txt"].kept
    assert "rule dropped" in caplog.text


def test_cancel_between_directories(make_tree):
    root = make_tree({"a/one.txt": "", "b/two.txt": "", "c.txt": ""})
    cancel = threading.Event()
    walker = TreeWalker(cancel_event=cancel)

    seen = []
    for entry in walker.walk(root):
        seen.append(entry.relative_path)
        cancel.set()

    # The directory being classified is finished, nothing deeper is visited
    assert seen == ["a", "b", "c.txt"]


def test_custom_rule_file(make_tree):
    root = make_tree({".mapignore": "*.txt\n", ".gitignore": "*.md\n", "a.txt": "", "b.md": ""})
    entries = by_path(walk_tree(root, rule_file=".mapignore"))

    assert not entries["a.txt"].kept
    assert entries["b.md"].kept


@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
def test_symlinked_directory_is_not_followed(make_tree):
    root = make_tree({"real/file.txt": ""})
    os.symlink(root / "real", root / "link")
    entries = by_path(walk_tree(root))

    assert not entries["link"].is_directory
    assert "link/file.txt" not in entries
    assert "real/file.txt" in entries
