"""Minimal Supabase (PostgREST) client for the ``products`` table."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from core.settings import SUPABASE, SupabaseSettings


class RemoteStoreError(Exception):
    """A write or read against the remote product table did not succeed."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class SupabaseProductStore:
    def __init__(
        self,
        settings: SupabaseSettings = SUPABASE,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings
        self.table = settings.table
        self._client = client
        self._owns_client = client is None

    @property
    def is_configured(self) -> bool:
        return self.settings.configured

    # ------------------------------------------------------------------
    # Initialisation helpers
    def _headers(self) -> Dict[str, str]:
        key = self.settings.anon_key or ""
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }

    def _ensure_client(self) -> httpx.AsyncClient:
        if not self.is_configured:
            raise RemoteStoreError("Supabase URL or anon key is not configured")
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"{self.settings.url}/rest/v1",
                headers=self._headers(),
                timeout=self.settings.timeout_sec,
            )
        return self._client

    async def _request(self, method: str, **kwargs: Any) -> httpx.Response:
        client = self._ensure_client()
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            response = await client.request(method, f"/{self.table}", headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise RemoteStoreError(f"{method} {self.table} failed: {exc}") from exc
        if response.is_error:
            detail = response.text[:500]
            raise RemoteStoreError(
                f"{method} {self.table} returned {response.status_code}: {detail}",
                status=response.status_code,
            )
        return response

    # ------------------------------------------------------------------
    # CRUD helpers
    async def list(self) -> List[Dict[str, Any]]:
        response = await self._request("GET", params={"select": "*"})
        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteStoreError(
                f"GET {self.table} returned a non-JSON body", status=response.status_code
            ) from exc
        return data if isinstance(data, list) else []

    async def insert(self, row: Dict[str, Any]) -> None:
        await self._request("POST", json=[row], headers={"Prefer": "return=minimal"})

    async def update(self, product_id: str, row: Dict[str, Any]) -> None:
        await self._request(
            "PATCH",
            params={"id": f"eq.{product_id}"},
            json=row,
            headers={"Prefer": "return=minimal"},
        )

    async def delete(self, product_id: str) -> None:
        await self._request(
            "DELETE",
            params={"id": f"eq.{product_id}"},
            headers={"Prefer": "return=minimal"},
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


__all__ = ["RemoteStoreError", "SupabaseProductStore"]
