import os
import threading
from pathlib import Path

import pytest

from vellum.scanner import HANDOFF_CAPACITY, HandOff, ScannedEntry, TreeScanner
from vellum.scanner import tree_scanner


def build_tree(root: Path, width: int = 4, depth: int = 3) -> set:
    expected = set()

    def grow(directory: Path, level: int) -> None:
        for i in range(width):
            f = directory / f"{i}.json"
            f.write_text("[]", encoding="utf-8")
            expected.add(f)
        if level == depth:
            return
        for i in range(width):
            sub = directory / f"d{i}"
            sub.mkdir()
            expected.add(sub)
            grow(sub, level + 1)

    grow(root, 1)
    return expected


def drain(handoff: HandOff, sink: list) -> threading.Thread:
    t = threading.Thread(target=lambda: sink.extend(handoff))
    t.start()
    return t


@pytest.mark.parametrize("workers", [1, 3, 8])
def test_scan_emits_every_entry_once(tmp_path, workers):
    expected = build_tree(tmp_path)
    handoff = HandOff()
    seen: list = []
    consumer = drain(handoff, seen)

    emitted = TreeScanner(workers).scan(tmp_path, handoff)
    consumer.join(timeout=30)

    assert not consumer.is_alive()
    assert emitted == len(expected)
    assert len(seen) == len(expected)
    assert {entry.path for entry in seen} == expected
    assert all(entry.is_dir == entry.path.is_dir() for entry in seen)


def test_more_entries_than_capacity_do_not_deadlock(tmp_path):
    for i in range(HANDOFF_CAPACITY * 3):
        (tmp_path / f"{i}.json").write_text("[]", encoding="utf-8")
    handoff = HandOff(capacity=5)
    seen: list = []
    consumer = drain(handoff, seen)

    TreeScanner(4).scan(tmp_path, handoff)
    consumer.join(timeout=30)

    assert len(seen) == HANDOFF_CAPACITY * 3


def test_empty_directory_closes_handoff(tmp_path):
    handoff = HandOff()
    assert TreeScanner(2).scan(tmp_path, handoff) == 0
    assert list(handoff) == []


def test_missing_root_is_not_fatal(tmp_path):
    handoff = HandOff()
    assert TreeScanner(2).scan(tmp_path / "absent", handoff) == 0
    assert list(handoff) == []


def test_handoff_rejects_puts_after_close():
    handoff = HandOff(capacity=2)
    handoff.close()
    handoff.close()
    with pytest.raises(RuntimeError):
        handoff.put(ScannedEntry(Path("x"), "x", False))


def test_worker_count_must_be_positive():
    with pytest.raises(ValueError):
        TreeScanner(0)


def test_default_capacity_is_one_hundred():
    assert HANDOFF_CAPACITY == 100
    assert HandOff().capacity == HANDOFF_CAPACITY


def test_put_blocks_when_full():
    handoff = HandOff(capacity=3)
    done = threading.Event()

    def produce():
        for i in range(4):
            handoff.put(ScannedEntry(Path(f"{i}.json"), f"{i}.json", False))
        done.set()

    producer = threading.Thread(target=produce, daemon=True)
    producer.start()
    producer.join(timeout=0.5)
    assert producer.is_alive()
    assert not done.is_set()

    reader = iter(handoff)
    assert next(reader).name == "0.json"
    producer.join(timeout=5)
    assert done.is_set()

    assert [next(reader).name for _ in range(3)] == ["1.json", "2.json", "3.json"]
    handoff.close()
    assert list(reader) == []


class _UnstatableEntry:
    def __init__(self, entry):
        self.name = entry.name
        self.path = entry.path

    def is_dir(self, follow_symlinks=True):
        raise PermissionError(f"cannot stat {self.path}")


def test_unstatable_and_unlistable_entries_are_dropped(tmp_path, monkeypatch):
    (tmp_path / "keep.json").write_text("[]", encoding="utf-8")
    (tmp_path / "broken.json").write_text("[]", encoding="utf-8")
    locked = tmp_path / "locked"
    locked.mkdir()
    (locked / "hidden.json").write_text("[]", encoding="utf-8")
    real_scandir = os.scandir

    class _Listing:
        def __init__(self, entries):
            self.entries = entries

        def __enter__(self):
            return iter(self.entries)

        def __exit__(self, *exc):
            return False

    def flaky_scandir(path):
        if Path(path) == locked:
            raise PermissionError(f"cannot list {path}")
        with real_scandir(path) as it:
            entries = [_UnstatableEntry(e) if e.name == "broken.json" else e for e in it]
        return _Listing(entries)

    monkeypatch.setattr(tree_scanner.os, "scandir", flaky_scandir)
    handoff = HandOff()
    seen: list = []
    consumer = drain(handoff, seen)

    emitted = TreeScanner(2).scan(tmp_path, handoff)
    consumer.join(timeout=30)

    assert emitted == 2
    assert sorted(entry.name for entry in seen) == ["keep.json", "locked"]
