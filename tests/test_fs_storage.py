"""Tests for the filesystem document store."""

import tempfile
from pathlib import Path

import pytest

from tendril.adapters.fs_storage import FsDocumentStore, check_title
from tendril.adapters.yaml_codec import parse_metadata, parse_tags
from tendril.core.model import DocumentSnapshot


@pytest.fixture
def store():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield FsDocumentStore(Path(tmpdir) / "wiki")


def test_write_and_read(store):
    """Test a snapshot is stored with frontmatter and read back."""
    store.write(DocumentSnapshot(
        title="Home",
        old_title="",
        body="\n  indented first line\n[[Link]]",
        tags="a, b c",
        metadata="author: me",
    ))

    raw = (store.root / "Home.md").read_text(encoding="utf-8")
    assert raw.startswith("---\ntitle: Home\n")

    doc = store.read("Home")
    assert doc.title == "Home"
    assert doc.body == "\n  indented first line\n[[Link]]"
    assert doc.tags == ["a", "b", "c"]
    assert doc.metadata == {"author": "me"}


def test_rename_removes_old_file(store):
    """Test a changed title moves the document."""
    store.write(DocumentSnapshot(title="Old", old_title="", body="x"))
    store.write(DocumentSnapshot(title="New", old_title="Old", body="x"))

    assert store.read("Old") is None
    assert store.read("New").body == "x"
    assert list(store.list_titles()) == ["New"]


def test_rename_from_missing_document(store):
    """Test renaming from a title that was never stored just writes."""
    store.write(DocumentSnapshot(title="New", old_title="Ghost", body="x"))
    assert list(store.list_titles()) == ["New"]


def test_delete_and_list(store):
    """Test deleting documents."""
    assert list(store.list_titles()) == []
    store.write(DocumentSnapshot(title="B", old_title="", body=""))
    store.write(DocumentSnapshot(title="A", old_title="", body=""))
    assert list(store.list_titles()) == ["A", "B"]

    store.delete("A")
    store.delete("A")
    assert list(store.list_titles()) == ["B"]


@pytest.mark.parametrize("title", ["", "   ", "a/b", "..\\x", ".hidden"])
def test_check_title_rejects(title):
    """Test unusable titles raise ValueError."""
    with pytest.raises(ValueError):
        check_title(title)


def test_check_title_strips():
    """Test titles are stripped."""
    assert check_title("  Daily Notes ") == "Daily Notes"


def test_parse_tags():
    """Test tag splitting."""
    assert parse_tags("a, b  c,,#d, a") == ["a", "b", "c", "d"]
    assert parse_tags("") == []


def test_parse_metadata():
    """Test key: value parsing."""
    assert parse_metadata("author: me\nno colon here\nurl: https://x.com\n") == {
        "author": "me",
        "url": "https://x.com",
    }
