"""Minimal HTTP client for the Sanity content lake API."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from .errors import DocumentNotFound, DuplicateDocument, StoreRequestError, StoreUnavailable

logger = logging.getLogger(__name__)


class SanityClient:
    """Query, mutate and upload against one project dataset.

    Reads may go through the API CDN; mutations and uploads always hit the
    live API host.
    """

    def __init__(
        self,
        project_id: str,
        *,
        dataset: str = "production",
        api_version: str = "2023-01-01",
        token: Optional[str] = None,
        use_cdn: bool = True,
        timeout: float = 20.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.project_id = project_id
        self.dataset = dataset
        self.api_version = api_version.lstrip("v")

        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._api = httpx.Client(
            base_url=f"https://{project_id}.api.sanity.io/v{self.api_version}",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        if use_cdn:
            self._cdn = httpx.Client(
                base_url=f"https://{project_id}.apicdn.sanity.io/v{self.api_version}",
                headers=headers,
                timeout=timeout,
                transport=transport,
            )
        else:
            self._cdn = self._api

    def close(self) -> None:
        self._api.close()
        if self._cdn is not self._api:
            self._cdn.close()

    def _request(self, client: httpx.Client, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise StoreUnavailable(f"Sanity request failed: {exc}") from exc

        if response.status_code >= 500:
            raise StoreUnavailable(
                f"Sanity returned {response.status_code}: {_error_message(response)}"
            )
        if response.status_code == 409:
            raise DuplicateDocument(f"Sanity returned 409: {_error_message(response)}")
        if response.status_code >= 400:
            raise StoreRequestError(
                f"Sanity returned {response.status_code}: {_error_message(response)}"
            )

        # Proxies and CDNs can answer 200 with an HTML error page.
        try:
            payload = response.json()
        except ValueError as exc:
            raise StoreUnavailable(
                f"Sanity returned a non-JSON body: {response.text[:200]!r}"
            ) from exc
        if not isinstance(payload, dict):
            raise StoreUnavailable(f"Sanity returned an unexpected body: {payload!r:.200}")
        return payload

    # Queries ---------------------------------------------------------------
    def fetch(
        self,
        query: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        use_cdn: bool = True,
    ) -> Any:
        """Run a GROQ query and return its ``result``."""

        query_params: Dict[str, str] = {"query": query}
        for key, value in (params or {}).items():
            query_params[f"${key}"] = json.dumps(value)

        client = self._cdn if use_cdn else self._api
        logger.debug("sanity_fetch dataset=%s cdn=%s", self.dataset, client is self._cdn)
        body = self._request(client, "GET", f"/data/query/{self.dataset}", params=query_params)
        return body.get("result")

    def get_document(self, document_id: str) -> Optional[Dict[str, Any]]:
        return self.fetch("*[_id == $id][0]", {"id": document_id}, use_cdn=False)

    # Mutations -------------------------------------------------------------
    def mutate(self, mutations: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        logger.debug("sanity_mutate dataset=%s count=%d", self.dataset, len(mutations))
        body = self._request(
            self._api,
            "POST",
            f"/data/mutate/{self.dataset}",
            params={"returnIds": "true", "returnDocuments": "true"},
            json={"mutations": mutations},
        )
        return body.get("results") or []

    def create(self, document: Dict[str, Any]) -> Dict[str, Any]:
        results = self.mutate([{"create": document}])
        if not results or "document" not in results[0]:
            raise StoreRequestError("Sanity create returned no document")
        return results[0]["document"]

    def create_if_not_exists(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Create ``document`` unless its ``_id`` exists; return the stored one."""

        self.mutate([{"createIfNotExists": document}])
        stored = self.get_document(document["_id"])
        if stored is None:
            raise StoreRequestError(f"Sanity lost document {document['_id']}")
        return stored

    def patch(self, document_id: str, set_fields: Dict[str, Any]) -> Dict[str, Any]:
        try:
            results = self.mutate([{"patch": {"id": document_id, "set": set_fields}}])
        except StoreRequestError as exc:
            if "does not exist" in str(exc):
                raise DocumentNotFound(document_id) from exc
            raise
        if not results or not results[0].get("document"):
            raise DocumentNotFound(document_id)
        return results[0]["document"]

    def delete(self, document_id: str) -> None:
        results = self.mutate([{"delete": {"id": document_id}}])
        if not results:
            raise DocumentNotFound(document_id)

    # Assets ----------------------------------------------------------------
    def upload_image(self, data: bytes, filename: str, content_type: str) -> Dict[str, Any]:
        body = self._request(
            self._api,
            "POST",
            f"/assets/images/{self.dataset}",
            params={"filename": filename},
            content=data,
            headers={"Content-Type": content_type},
        )
        return body["document"]


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if not isinstance(payload, dict):
        return response.text[:200]
    error = payload.get("error")
    if isinstance(error, dict):
        return error.get("description") or error.get("type") or str(error)
    return payload.get("message") or str(error or payload)


__all__ = ["SanityClient"]
