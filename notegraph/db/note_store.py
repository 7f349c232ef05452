# notegraph/db/note_store.py
import json
from pathlib import Path
from typing import Protocol

from notegraph.core.exceptions import DataUnavailableException
from notegraph.models.note import NoteRecord

class NoteStore(Protocol):
    """Source of a user's notes. Fetches return a complete snapshot."""

    async def fetch_notes_for_user(self, user_id: str) -> list[NoteRecord]: ...

    async def update_note(self, user_id: str, note: NoteRecord) -> None: ...

class InMemoryNoteStore:
    def __init__(self, notes_by_user: dict[str, list[NoteRecord]] | None = None):
        self.notes_by_user: dict[str, list[NoteRecord]] = notes_by_user or {}

    @classmethod
    def from_json_file(cls, path: Path, user_id: str) -> "InMemoryNoteStore":
        """Load a JSON array of note objects as the notes of `user_id`."""
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise DataUnavailableException(f"Could not read notes from {path}: {exc}") from exc

        if not isinstance(payload, list):
            raise DataUnavailableException(f"Expected a JSON array of notes in {path}.")
        return cls({user_id: [NoteRecord.model_validate(item) for item in payload]})

    async def fetch_notes_for_user(self, user_id: str) -> list[NoteRecord]:
        return [note.model_copy(deep=True) for note in self.notes_by_user.get(user_id, [])]

    async def update_note(self, user_id: str, note: NoteRecord) -> None:
        notes = self.notes_by_user.get(user_id, [])
        for index, existing in enumerate(notes):
            if existing.id == note.id:
                notes[index] = note.model_copy(deep=True)
                return
        raise DataUnavailableException(f"Note {note.id} does not exist for this user.")
