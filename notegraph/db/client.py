# notegraph/db/client.py
import logging

import httpx

from notegraph.core.config import settings

logger = logging.getLogger(__name__)

class SupabaseClient:
    """Process-wide httpx client for the Supabase REST endpoint."""
    _client: httpx.AsyncClient | None = None

    @classmethod
    def get_client(cls) -> httpx.AsyncClient:
        if cls._client is None:
            cls._client = httpx.AsyncClient(
                base_url=settings.SUPABASE_URL.rstrip("/"),
                headers={
                    "apikey": settings.SUPABASE_KEY,
                    "Authorization": f"Bearer {settings.SUPABASE_KEY}",
                    "Accept": "application/json",
                },
                timeout=settings.NOTE_STORE_TIMEOUT,
            )
            logger.info("Created Supabase client for %s", settings.SUPABASE_URL)
        return cls._client

    @classmethod
    async def close_client(cls) -> None:
        if cls._client is not None:
            await cls._client.aclose()
            cls._client = None

def get_http_client() -> httpx.AsyncClient:
    return SupabaseClient.get_client()
