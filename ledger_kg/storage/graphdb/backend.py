"""
GraphDB Store Backend

Talks to an RDF4J / GraphDB repository over the SPARQL 1.1 protocol:

    POST {url}/repositories/{repo}                       SELECT queries
    POST {url}/repositories/{repo}/statements            SPARQL UPDATE
    POST {url}/repositories/{repo}/rdf-graphs/service    bulk insert (graph=...)
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import aiohttp

from ledger_kg.config import KGConfig
from ledger_kg.errors import StoreError
from ledger_kg.storage.base import Binding, StoreClient, StoreResponse

logger = logging.getLogger(__name__)

SPARQL_RESULTS_JSON = "application/sparql-results+json"


class GraphDBStore(StoreClient):
    """
    HTTP client for a GraphDB repository.

    A semaphore bounds the number of in-flight requests. Sessions are created
    lazily and reused until close().
    """

    def __init__(
        self,
        url: str,
        repository: str,
        *,
        username: str | None = None,
        password: str | None = None,
        max_concurrency: int = 10,
        timeout_seconds: float | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        self._url = url.rstrip("/")
        self._repository = repository
        self._auth = aiohttp.BasicAuth(username, password or "") if username else None
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, config: KGConfig) -> "GraphDBStore":
        return cls(
            config.store_url,
            config.store_repository,
            username=config.store_username,
            password=config.store_password,
            max_concurrency=config.store_max_concurrency,
            timeout_seconds=config.store_timeout_seconds,
        )

    @property
    def repository_url(self) -> str:
        return f"{self._url}/repositories/{self._repository}"

    async def initialize(self) -> None:
        await self._ensure_session()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(auth=self._auth, timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _post(
        self,
        url: str,
        data: str,
        headers: dict[str, str],
        params: dict[str, str] | None = None,
    ) -> tuple[int, str]:
        session = await self._ensure_session()
        async with self._semaphore:
            try:
                async with session.post(
                    url, data=data.encode("utf-8"), headers=headers, params=params
                ) as response:
                    return response.status, await response.text()
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise StoreError(f"GraphDB request to {url} failed: {e}") from e

    async def query(self, query: str) -> list[Binding]:
        status, body = await self._post(
            self.repository_url,
            query,
            {"Content-Type": "application/sparql-query", "Accept": SPARQL_RESULTS_JSON},
        )
        if not 200 <= status < 300:
            logger.error(f"GraphDB query failed ({status}): {body[:500]}")
            raise StoreError(f"GraphDB query failed: {status}", status=status, body=body)

        try:
            payload: dict[str, Any] = json.loads(body)
        except json.JSONDecodeError as e:
            raise StoreError("GraphDB returned invalid JSON", status=status, body=body) from e
        return list(payload.get("results", {}).get("bindings", []))

    async def update(self, update: str) -> StoreResponse:
        status, body = await self._post(
            f"{self.repository_url}/statements",
            update,
            {"Content-Type": "application/sparql-update"},
        )
        return StoreResponse(ok=200 <= status < 300, status=status, body=body or None)

    async def insert(
        self,
        graph_iri: str,
        payload: str,
        content_type: str = "text/turtle",
    ) -> StoreResponse:
        status, body = await self._post(
            f"{self.repository_url}/rdf-graphs/service",
            payload,
            {"Content-Type": content_type},
            params={"graph": graph_iri},
        )
        return StoreResponse(ok=200 <= status < 300, status=status, body=body or None)
