"""Tests for API functionality."""

import asyncio
import tempfile
from pathlib import Path

import httpx
import pytest

pytest.importorskip("fastapi")

from fastapi.testclient import TestClient

from tendril.adapters.fs_storage import FsDocumentStore
from tendril.adapters.http_writer import HttpDocumentWriter
from tendril.adapters.recent import RecentTitles
from tendril.api.app import create_app, generate_token
from tendril.core.channel import ChannelHub
from tendril.core.coordinator import ERROR, IDLE
from tendril.runtime import Runtime
from tendril.view import DocumentView


@pytest.fixture
def runtime():
    """Create a runtime with a test wiki."""
    with tempfile.TemporaryDirectory() as tmpdir:
        wiki_path = Path(tmpdir) / "wiki"
        wiki_path.mkdir()

        # Mock config
        class MockConfig:
            pass

        rt = Runtime(
            store=FsDocumentStore(wiki_path),
            recent=RecentTitles(),
            config=MockConfig(),  # type: ignore
        )

        yield rt


def edit(client, **fields):
    payload = {"body": "", "old_title": "", "tags": "", "metadata": ""}
    payload.update(fields)
    return client.post("/edit", json=payload)


def test_health_endpoint(runtime):
    """Test /health endpoint."""
    client = TestClient(create_app(runtime, token=None))

    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_auth_required(runtime):
    """Test that endpoints require authentication when token is set."""
    token = generate_token()
    client = TestClient(create_app(runtime, token=token))

    assert client.get("/health").status_code == 401
    assert edit(client, title="Home").status_code == 401

    response = client.get("/health", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


def test_edit_and_get(runtime):
    """Test storing a document and reading it back with its HTML form."""
    client = TestClient(create_app(runtime, token=None))

    response = edit(
        client,
        title="Home",
        body="Welcome, see [[Daily Notes]]\nmail me@x.com",
        tags="journal, home",
        metadata="author: me\nmood: calm",
    )
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "title": "Home"}

    response = client.get("/notes/Home")
    assert response.status_code == 200
    data = response.json()
    assert data["body"] == "Welcome, see [[Daily Notes]]\nmail me@x.com"
    assert data["tags"] == "journal, home"
    assert data["metadata"] == "author: me\nmood: calm"
    assert '<a href="/Daily%20Notes">Daily Notes</a>' in data["html"]
    assert '<a href="mailto:me@x.com">me@x.com</a>' in data["html"]

    assert client.get("/recent").json() == ["Home"]


def test_edit_renames(runtime):
    """Test old_title moves the document to its new title."""
    client = TestClient(create_app(runtime, token=None))
    edit(client, title="Home", body="content")

    response = edit(client, title="Start", old_title="Home", body="content")
    assert response.status_code == 200

    assert client.get("/notes/Home").status_code == 404
    assert client.get("/notes/Start").json()["body"] == "content"
    assert client.get("/recent").json() == ["Start"]


def test_edit_rejects_bad_titles(runtime):
    """Test empty and path-like titles are refused."""
    client = TestClient(create_app(runtime, token=None))

    assert edit(client, title="   ").status_code == 400
    assert edit(client, title="../escape").status_code == 400
    assert client.post("/edit", json={"body": "no title"}).status_code == 422


def test_get_note_not_found(runtime):
    """Test /notes/{title} with a nonexistent document."""
    client = TestClient(create_app(runtime, token=None))
    assert client.get("/notes/nonexistent").status_code == 404


def test_delete_note(runtime):
    """Test deleting a document removes its file and its recent entry."""
    client = TestClient(create_app(runtime, token=None))
    edit(client, title="Home", body="content")
    edit(client, title="Other", body="more")
    assert client.get("/recent").json() == ["Other", "Home"]

    response = client.delete("/notes/Home")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "title": "Home"}

    assert client.get("/notes/Home").status_code == 404
    assert client.get("/recent").json() == ["Other"]
    assert list(runtime.store.list_titles()) == ["Other"]


def test_delete_missing_note(runtime):
    """Test deleting an unknown or path-like title."""
    client = TestClient(create_app(runtime, token=None))
    assert client.delete("/notes/nonexistent").status_code == 404
    assert client.delete("/notes/.hidden").status_code == 400


def test_view_saves_to_server(runtime):
    """Test a document view writing through HTTP into the store."""
    app = create_app(runtime, token=None)

    async def scenario(body_blocks):
        client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://wiki.test"
        )
        writer = HttpDocumentWriter("http://wiki.test", client=client)
        hub = ChannelHub()
        view = DocumentView(hub, writer, RecentTitles())
        try:
            await view.open("/Home", current_title="Home")
            title = view.region("title")
            title.mount("Home")
            view.region("tag").mount("wiki")
            view.region("metadata").mount("")
            for i, content in enumerate(body_blocks):
                view.region(f"block-{i}").mount(content)
            title.save()
            await view.settle()
            return view.state
        finally:
            await view.close()
            await client.aclose()

    assert asyncio.run(scenario(["first", "[[Second]]"])) == IDLE
    doc = runtime.store.read("Home")
    assert doc.body == "first\n[[Second]]"
    assert doc.tags == ["wiki"]


def test_view_rejected_by_server(runtime):
    """Test a server-side rejection puts the view in error."""
    app = create_app(runtime, token=None)

    async def scenario():
        client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://wiki.test"
        )
        writer = HttpDocumentWriter("http://wiki.test", client=client)
        view = DocumentView(ChannelHub(), writer)
        try:
            await view.open("/Home")
            title = view.region("title")
            title.mount("bad/title")
            title.save()
            await view.settle()
            return view.state
        finally:
            await view.close()
            await client.aclose()

    assert asyncio.run(scenario()) == ERROR
