# notegraph/services/link_service.py
import logging

from notegraph.core.exceptions import InvalidInputException
from notegraph.db.note_store import NoteStore
from notegraph.models.note import NoteRecord
from notegraph.services.graph_service import GraphService
from notegraph.services.link_parser import dedupe_targets, rewrite_links

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 10

class LinkService:
    """Backlinks, autocomplete and rename propagation over a user's notes."""

    def __init__(self, store: NoteStore, retry_delay: float = 0.5):
        self.store = store
        self.graph_service = GraphService(store, retry_delay=retry_delay)

    async def get_backlinks(self, user_id: str, title: str) -> list[NoteRecord]:
        notes = await self.graph_service.fetch_notes(user_id)
        return [note for note in notes if title in note.outgoing_links]

    async def get_note_by_title(self, user_id: str, title: str) -> NoteRecord | None:
        notes = await self.graph_service.fetch_notes(user_id)
        return next((note for note in notes if note.title == title), None)

    async def check_notes_exist(self, user_id: str, titles: list[str]) -> dict[str, bool]:
        if not titles:
            return {}
        notes = await self.graph_service.fetch_notes(user_id)
        existing = {note.title for note in notes}
        return {title: title in existing for title in titles}

    async def get_title_suggestions(
        self, user_id: str, partial: str, limit: int = MAX_SUGGESTIONS
    ) -> list[str]:
        """Titles containing `partial`: exact match first, then prefixes, then the rest."""
        if not partial:
            return []
        needle = partial.lower()
        notes = await self.graph_service.fetch_notes(user_id)
        matches = [note.title for note in notes if needle in note.title.lower()]

        def _rank(title: str) -> tuple[int, str]:
            lowered = title.lower()
            if lowered == needle:
                return 0, title
            if lowered.startswith(needle):
                return 1, title
            return 2, title

        return sorted(dedupe_targets(matches), key=_rank)[:limit]

    async def update_links_on_rename(self, user_id: str, old_title: str, new_title: str) -> int:
        if not new_title or not new_title.strip():
            raise InvalidInputException("New note title cannot be empty.")
        if not old_title or old_title == new_title:
            return 0

        notes = await self.graph_service.fetch_notes(user_id)
        updated = 0
        for note in notes:
            if old_title not in note.outgoing_links:
                continue
            renamed = note.model_copy(update={
                "description": rewrite_links(note.description, old_title, new_title),
                "outgoing_links": dedupe_targets(
                    [new_title if link == old_title else link for link in note.outgoing_links]
                ),
            })
            await self.graph_service.save_note(user_id, renamed)
            updated += 1

        logger.info("Renamed links '%s' -> '%s' in %d note(s)", old_title, new_title, updated)
        return updated
