import pytest

from notegraph.core.exceptions import InvalidInputException
from notegraph.db.note_store import InMemoryNoteStore
from notegraph.models.note import NoteRecord
from notegraph.services.link_service import LinkService

USER = "user-1"


@pytest.fixture
def store() -> InMemoryNoteStore:
    notes = [
        NoteRecord(id="1", title="Project Plan", outgoing_links=["Roadmap"], description="see [[Roadmap|the map]]"),
        NoteRecord(id="2", title="Roadmap", outgoing_links=["Project Plan"], description="back to [[Project Plan]]"),
        NoteRecord(id="3", title="Plan B", outgoing_links=["Roadmap", "Ideas"], description="[[Roadmap]] and [[Ideas]]"),
        NoteRecord(id="4", title="plan", description="lowercase title"),
        NoteRecord(id="5", title="Airplane", description=""),
    ]
    return InMemoryNoteStore({USER: notes})


@pytest.mark.asyncio
async def test_backlinks_list_linking_notes(store):
    backlinks = await LinkService(store).get_backlinks(USER, "Roadmap")
    assert [note.id for note in backlinks] == ["1", "3"]


@pytest.mark.asyncio
async def test_suggestions_rank_exact_then_prefix_then_contains(store):
    suggestions = await LinkService(store).get_title_suggestions(USER, "plan")
    assert suggestions == ["plan", "Plan B", "Airplane", "Project Plan"]


@pytest.mark.asyncio
async def test_suggestions_for_empty_partial(store):
    assert await LinkService(store).get_title_suggestions(USER, "") == []


@pytest.mark.asyncio
async def test_check_notes_exist(store):
    result = await LinkService(store).check_notes_exist(USER, ["Roadmap", "Ideas"])
    assert result == {"Roadmap": True, "Ideas": False}


@pytest.mark.asyncio
async def test_get_note_by_title_is_exact(store):
    service = LinkService(store)
    assert (await service.get_note_by_title(USER, "plan")).id == "4"
    assert await service.get_note_by_title(USER, "PLAN") is None


@pytest.mark.asyncio
async def test_rename_rewrites_bodies_and_stored_links(store):
    updated = await LinkService(store).update_links_on_rename(USER, "Roadmap", "Strategy")
    assert updated == 2

    notes = {note.id: note for note in await store.fetch_notes_for_user(USER)}
    assert notes["1"].description == "see [[Strategy|the map]]"
    assert notes["1"].outgoing_links == ["Strategy"]
    assert notes["3"].outgoing_links == ["Strategy", "Ideas"]
    assert notes["2"].description == "back to [[Project Plan]]"


@pytest.mark.asyncio
async def test_rename_to_empty_title_is_rejected(store):
    with pytest.raises(InvalidInputException):
        await LinkService(store).update_links_on_rename(USER, "Roadmap", "  ")
