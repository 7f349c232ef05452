# notegraph/db/repositories/note_repository.py
import logging

import httpx
from pydantic import ValidationError

from notegraph.core.exceptions import DataUnavailableException
from notegraph.models.note import NoteRecord

logger = logging.getLogger(__name__)

NOTE_COLUMNS = "id,title,tags,outgoing_links,description"

class SupabaseNoteStore:
    """Reads and updates notes through Supabase's PostgREST interface."""

    def __init__(self, client: httpx.AsyncClient, table: str = "notes"):
        self.client = client
        self.table = table

    @property
    def path(self) -> str:
        return f"/rest/v1/{self.table}"

    async def fetch_notes_for_user(self, user_id: str) -> list[NoteRecord]:
        """
        Returns every note owned by the user in one request.
        Transport errors propagate so callers can retry them.
        """
        params = {
            "select": NOTE_COLUMNS,
            "user_id": f"eq.{user_id}",
            "order": "created_at.desc",
        }
        response = await self.client.get(self.path, params=params)
        rows = self._json_or_raise(response, "fetch notes")

        if not isinstance(rows, list):
            raise DataUnavailableException("Note store returned an unexpected payload.")
        try:
            return [self._to_record(row) for row in rows]
        except ValidationError as exc:
            logger.error("Malformed note row from store: %s", exc)
            raise DataUnavailableException("Note store returned malformed notes.") from exc

    async def update_note(self, user_id: str, note: NoteRecord) -> None:
        params = {"id": f"eq.{note.id}", "user_id": f"eq.{user_id}"}
        payload = {
            "title": note.title,
            "description": note.description,
            "tags": note.tags,
            "outgoing_links": note.outgoing_links,
        }
        response = await self.client.patch(
            self.path,
            params=params,
            json=payload,
            headers={"Prefer": "return=minimal"},
        )
        self._json_or_raise(response, "update note", expect_body=False)

    @staticmethod
    def _to_record(row: dict) -> NoteRecord:
        # Postgres arrays and text columns come back as null when unset.
        return NoteRecord.model_validate({
            "id": str(row.get("id") or ""),
            "title": row.get("title") or "",
            "tags": row.get("tags") or [],
            "outgoing_links": row.get("outgoing_links") or [],
            "description": row.get("description") or "",
        })

    @staticmethod
    def _json_or_raise(response: httpx.Response, action: str, expect_body: bool = True):
        if response.status_code >= 400:
            logger.error("Note store failed to %s: HTTP %s %s", action, response.status_code, response.text)
            raise DataUnavailableException(
                f"Note store failed to {action} (HTTP {response.status_code})."
            )
        if not expect_body:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise DataUnavailableException(f"Note store returned invalid JSON while trying to {action}.") from exc
