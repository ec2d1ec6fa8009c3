"""
REST Remote Store Implementation

Talks to the finance REST API over httpx.

The API answers either with a bare JSON body or with the body wrapped in a
`{"data": ...}` envelope. Unwrapping happens here, and so does telling a full
update echo (wrapped) from a raw patch echo (unwrapped); callers receive an
explicit UpdateResponse variant instead.

Dates go out as YYYY-MM-DD. Token acquisition is not handled here; a token
from the settings is attached as a bearer header if present.
"""

from typing import Any, Optional

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bizledger.config import RemoteSettings, get_settings
from bizledger.models.finance import (
    Category,
    CategoryDraft,
    DateRange,
    Transaction,
    TransactionDraft,
    TransactionKind,
    TransactionPatch,
)
from bizledger.models.mutation import FullRecordResponse, PatchResponse, UpdateResponse
from bizledger.services.remote.interface import (
    MalformedResponseError,
    NotFoundError,
    RemoteClient,
    RemoteConnectionError,
    RemoteError,
)


ENVELOPE_KEY = "data"


def unwrap(payload: Any) -> Any:
    """Strip a `{"data": ...}` envelope if there is one."""
    if isinstance(payload, dict) and ENVELOPE_KEY in payload:
        return payload[ENVELOPE_KEY]
    return payload


class HttpRemoteClient(RemoteClient):
    """
    httpx implementation of the remote store.

    Read-only list requests are retried on connection failures.
    Writes are sent exactly once.
    """

    def __init__(
        self,
        settings: Optional[RemoteSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings or get_settings().remote
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client."""
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self._settings.token:
                headers["Authorization"] = f"Bearer {self._settings.token}"
            self._client = httpx.AsyncClient(
                base_url=self._settings.base_url,
                headers=headers,
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpRemoteClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(body, dict) and "message" in body:
            return str(body["message"])
        return str(body)[:200]

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """Send one request and return the decoded JSON body (None if empty)."""
        try:
            response = await self._get_client().request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise RemoteConnectionError(f"{method} {path} timed out") from e
        except httpx.TransportError as e:
            raise RemoteConnectionError(f"Could not reach remote store: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"{method} {path}: not found", status_code=404)
        if response.is_error:
            raise RemoteError(
                f"{method} {path} failed with status {response.status_code}: "
                f"{self._error_detail(response)}",
                status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"{method} {path} returned a non-JSON body",
                status_code=response.status_code,
            ) from e

    async def _get(self, path: str, params: Optional[dict] = None) -> Any:
        """GET with retries on connection failures."""
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(RemoteConnectionError),
            stop=stop_after_attempt(self._settings.connect_retries),
            wait=wait_exponential(multiplier=0.2, max=2),
            reraise=True,
        ):
            with attempt:
                return await self._request("GET", path, params=params)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(
        self,
        kind: TransactionKind,
        limit: int,
        offset: int,
        search: Optional[str] = None,
        date_range: Optional[DateRange] = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "type": kind.value,
            "limit": limit,
            "offset": offset,
        }
        if search:
            params["search"] = search
        if date_range is not None:
            params["start_date"] = date_range.start.isoformat()
            params["end_date"] = date_range.end.isoformat()

        payload = unwrap(await self._get("/transactions", params=params))
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise MalformedResponseError("Transaction list is not an array")
        return payload

    async def create_transaction(self, draft: TransactionDraft) -> Transaction:
        body = unwrap(await self._request("POST", "/transactions", json=draft.to_wire()))
        try:
            return Transaction.model_validate(body)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Create response is not a transaction: {e.error_count()} errors"
            ) from e

    async def update_transaction(
        self,
        transaction_id: str,
        patch: TransactionPatch,
    ) -> UpdateResponse:
        sent = patch.to_wire()
        body = await self._request("PUT", f"/transactions/{transaction_id}", json=sent)

        if isinstance(body, dict) and isinstance(body.get(ENVELOPE_KEY), dict):
            try:
                record = Transaction.model_validate(body[ENVELOPE_KEY])
            except ValidationError as e:
                raise MalformedResponseError(
                    f"Update response is not a transaction: {e.error_count()} errors"
                ) from e
            return FullRecordResponse(record=record)

        if isinstance(body, dict):
            return PatchResponse(changes=body)

        # Empty or non-object body: the store accepted what we sent
        return PatchResponse(changes=sent)

    async def delete_transaction(self, transaction_id: str) -> None:
        await self._request("DELETE", f"/transactions/{transaction_id}")

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self) -> list[Category]:
        payload = unwrap(await self._get("/categories"))
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise MalformedResponseError("Category list is not an array")

        categories = []
        for item in payload:
            try:
                categories.append(Category.model_validate(item))
            except ValidationError:
                continue
        return categories

    async def create_category(self, draft: CategoryDraft) -> Category:
        body = unwrap(await self._request("POST", "/categories", json=draft.to_wire()))
        try:
            return Category.model_validate(body)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Create response is not a category: {e.error_count()} errors"
            ) from e

    async def delete_category(self, category_id: str) -> None:
        await self._request("DELETE", f"/categories/{category_id}")
