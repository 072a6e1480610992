import asyncio
import io
import zipfile

import pytest

from foldertree.core import archive_builder
from foldertree.core.archive_builder import build_archive_tree, ingest_archive, read_archive_entry
from foldertree.core.errors import ArchiveDecodeError, SizeLimitExceededError
from foldertree.core.nodes import ArchiveEntryHandle, DirectoryNode, FileNode, SourceKind, iter_nodes


def make_zip(entries: dict[str, str]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buf.getvalue()


def names(node: DirectoryNode) -> list[str]:
    return [child.name for child in node.children]


def test_duplicate_directory_entries_merge_into_one_node():
    data = make_zip({"a/": "", "a/b.txt": "b", "a/c/": "", "a/c/d.txt": "d"})

    tree = build_archive_tree(data, "sample.zip")

    assert names(tree.root) == ["a"]
    a = tree.root.children[0]
    assert isinstance(a, DirectoryNode)
    assert names(a) == ["c", "b.txt"]
    c = a.child("c")
    assert isinstance(c, DirectoryNode)
    assert names(c) == ["d.txt"]
    assert isinstance(c.children[0], FileNode)


def test_paths_are_canonical_and_root_is_empty():
    data = make_zip({"a/c/d.txt": "d"})

    tree = build_archive_tree(data, "sample.zip")

    assert tree.root.path == ""
    assert [n.path for n in iter_nodes(tree.root)] == ["", "a", "a/c", "a/c/d.txt"]


def test_root_named_after_archive_without_suffix():
    tree = build_archive_tree(make_zip({"x.txt": "x"}), "My Project.ZIP")

    assert tree.name == "My Project"
    assert tree.source_kind is SourceKind.ARCHIVE


def test_implied_directories_are_created_without_explicit_entries():
    tree = build_archive_tree(make_zip({"deep/er/still/file.py": ""}), "d.zip")

    node = tree.find("deep/er/still")
    assert isinstance(node, DirectoryNode)
    assert names(node) == ["file.py"]


def test_doubled_separators_and_degenerate_entries_are_ignored():
    data = make_zip({"a//b.txt": "b", "//": ""})

    tree = build_archive_tree(data, "s.zip")

    assert names(tree.root) == ["a"]
    assert tree.find("a/b.txt") is not None
    assert list(tree.file_index) == ["a/b.txt"]


def test_empty_directory_entry_is_a_directory():
    tree = build_archive_tree(make_zip({"empty/": "", "file": "f"}), "s.zip")

    empty = tree.find("empty")
    assert isinstance(empty, DirectoryNode)
    assert empty.children == []
    assert "empty" not in tree.file_index


def test_file_index_covers_exactly_the_file_leaves():
    data = make_zip({"a/": "", "a/b.txt": "b", "a/c/d.txt": "d", "top.md": "t"})

    tree = build_archive_tree(data, "s.zip")

    files = {n.path for n in iter_nodes(tree.root) if isinstance(n, FileNode)}
    assert set(tree.file_index) == files == {"a/b.txt", "a/c/d.txt", "top.md"}
    for path, handle in tree.file_index.items():
        assert isinstance(handle, ArchiveEntryHandle)
        assert tree.find(path).source is handle


def test_children_sorted_directories_first():
    data = make_zip({"b.txt": "", "A.txt": "", "zdir/x": "", "adir/y": "", "Mdir/": ""})

    tree = build_archive_tree(data, "s.zip")

    assert names(tree.root) == ["adir", "Mdir", "zdir", "A.txt", "b.txt"]


def test_file_and_directory_with_same_name_is_a_decode_failure():
    data = make_zip({"a": "file", "a/b.txt": "nested"})

    with pytest.raises(ArchiveDecodeError) as excinfo:
        build_archive_tree(data, "s.zip")
    assert excinfo.value.code == "decode_failure"
    assert "'a'" in excinfo.value.message


def test_corrupt_archive_raises_single_descriptive_failure():
    with pytest.raises(ArchiveDecodeError) as excinfo:
        build_archive_tree(b"definitely not a zip", "broken.zip")

    assert excinfo.value.message.startswith("Failed to process ZIP: ")
    assert excinfo.value.status_code == 422


def test_size_ceiling_rejects_before_any_decode(monkeypatch):
    calls = []

    def fake_zipfile(*args, **kwargs):
        calls.append(args)
        raise AssertionError("archive must not be opened")

    monkeypatch.setattr(archive_builder.zipfile, "ZipFile", fake_zipfile)

    with pytest.raises(SizeLimitExceededError) as excinfo:
        asyncio.run(ingest_archive(b"PK", "big.zip", size=50 * 1024 * 1024 + 1))

    assert calls == []
    assert excinfo.value.status_code == 413
    assert excinfo.value.message == "File exceeds 50MB limit"


def test_size_ceiling_is_inclusive_of_the_limit():
    with pytest.raises(ArchiveDecodeError):
        build_archive_tree(b"garbage", "edge.zip", size=50 * 1024 * 1024)


def test_size_ceiling_checks_actual_bytes_too():
    with pytest.raises(SizeLimitExceededError):
        build_archive_tree(b"x" * (1024 * 1024 + 1), "small.zip", size=10, max_mb=1)


def test_ingest_and_read_entry_round_trip():
    data = make_zip({"docs/readme.md": "# hello\n"})

    async def scenario():
        tree = await ingest_archive(data, "docs.zip")
        return await read_archive_entry(tree.file_index["docs/readme.md"])

    assert asyncio.run(scenario()) == b"# hello\n"


def test_directory_attribute_marks_an_entry_without_trailing_slash():
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        dos_dir = zipfile.ZipInfo("legacy")
        dos_dir.external_attr = 0x10
        zf.writestr(dos_dir, "")
        unix_dir = zipfile.ZipInfo("unix")
        unix_dir.external_attr = (0o40755 << 16)
        zf.writestr(unix_dir, "")
        zf.writestr("plain", "p")

    tree = build_archive_tree(buf.getvalue(), "s.zip")

    assert isinstance(tree.find("legacy"), DirectoryNode)
    assert isinstance(tree.find("unix"), DirectoryNode)
    assert isinstance(tree.find("plain"), FileNode)
    assert list(tree.file_index) == ["plain"]


def test_repeated_member_name_serves_the_last_copy():
    buf = io.BytesIO()
    with pytest.warns(UserWarning):
        with zipfile.ZipFile(buf, "w") as zf:
            zf.writestr("notes.txt", "old")
            zf.writestr("other.txt", "o")
            zf.writestr("notes.txt", "new")

    async def scenario():
        tree = await ingest_archive(buf.getvalue(), "dup.zip")
        return tree, await read_archive_entry(tree.file_index["notes.txt"])

    tree, data = asyncio.run(scenario())
    assert names(tree.root) == ["notes.txt", "other.txt"]
    assert data == b"new"
