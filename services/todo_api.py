"""Minimal HTTP client for the remote todo list endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

import requests
from urllib3.exceptions import NameResolutionError

from core.errors import ErrorKind, MalformedResponseError, RemoteError, TransportError
from core.settings import API


logger = logging.getLogger(__name__)

# the remote may name the todo text either way
TEXT_FIELDS = ("todo", "title")
ITEM_CONTAINERS = ("todos", "items")


@dataclass(frozen=True)
class RemoteItem:
    id: int
    text: str
    completed: bool
    user_id: Optional[int]


@dataclass(frozen=True)
class PagedResponse:
    items: List[RemoteItem]
    total: int
    limit: Optional[int] = None
    skip: int = 0
    kind: Literal["paged"] = field(default="paged", init=False)


@dataclass(frozen=True)
class ListResponse:
    items: List[RemoteItem]
    kind: Literal["list"] = field(default="list", init=False)

    @property
    def total(self) -> int:
        return len(self.items)


TodosResponse = Union[PagedResponse, ListResponse]


def parse_item(raw: Any) -> RemoteItem:
    if not isinstance(raw, Mapping):
        raise MalformedResponseError(f"Todo item is not an object: {raw!r}")
    record_id = raw.get("id")
    if isinstance(record_id, bool) or not isinstance(record_id, int):
        raise MalformedResponseError(f"Todo item has invalid id: {record_id!r}")
    text = next((raw[name] for name in TEXT_FIELDS if raw.get(name)), "")
    user_id = raw.get("userId")
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        user_id = None
    return RemoteItem(
        id=record_id,
        text=str(text),
        completed=bool(raw.get("completed", False)),
        user_id=user_id,
    )


def parse_todos_response(payload: Any) -> TodosResponse:
    """Resolve the response shape once: bare array or object with a total."""

    if isinstance(payload, list):
        return ListResponse(items=[parse_item(item) for item in payload])

    if isinstance(payload, Mapping):
        raw_items = None
        for name in ITEM_CONTAINERS:
            if name in payload:
                raw_items = payload[name]
                break
        if not isinstance(raw_items, list):
            raise MalformedResponseError("Response object carries no todo list")
        items = [parse_item(item) for item in raw_items]
        total = payload.get("total")
        if isinstance(total, bool) or not isinstance(total, int) or total < 0:
            total = len(items)
        limit = payload.get("limit")
        skip = payload.get("skip")
        return PagedResponse(
            items=items,
            total=total,
            limit=limit if isinstance(limit, int) else None,
            skip=skip if isinstance(skip, int) else 0,
        )

    raise MalformedResponseError(f"Unexpected response type: {type(payload).__name__}")


class TodoApiClient:
    """Single-shot JSON requests with a fixed timeout; no retries."""

    def __init__(
        self,
        base_url: str = API.base_url,
        *,
        timeout: float = API.timeout_sec,
        session: Optional[requests.Session] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Content-Type": "application/json", **(headers or {})}

    # Endpoints
    def get_todos(self, limit: int, skip: int) -> TodosResponse:
        payload = self._request("GET", API.todos_endpoint, params={"limit": limit, "skip": skip})
        return parse_todos_response(payload)

    def add_todo(self, text: str, completed: bool, user_id: int) -> RemoteItem:
        body = {"todo": text, "completed": completed, "userId": user_id}
        payload = self._request("POST", API.add_endpoint, json=body)
        return parse_item(payload)

    # Transport helpers
    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        url = self._url(endpoint)
        try:
            response = self.session.request(
                method,
                url,
                headers=self.headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.exceptions.Timeout as exc:
            raise TransportError(
                ErrorKind.TRANSPORT_TIMEOUT,
                f"Request timed out after {self.timeout:g}s",
                url=url,
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            if _is_name_resolution_failure(exc):
                raise TransportError(
                    ErrorKind.TRANSPORT_OFFLINE, "You appear to be offline", url=url
                ) from exc
            raise TransportError(
                ErrorKind.TRANSPORT_REFUSED, "Unable to connect to the server", url=url
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise TransportError(
                ErrorKind.TRANSPORT_REFUSED, f"Network error occurred: {exc}", url=url
            ) from exc

        if not response.ok:
            raise RemoteError(response.status_code, _error_payload(response))

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"Response from {url} is not valid JSON") from exc


def _error_payload(response: requests.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {"message": response.text or ""}
    return data if isinstance(data, dict) else {}


def _is_name_resolution_failure(exc: BaseException) -> bool:
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, NameResolutionError):
            return True
        reason = getattr(current, "reason", None)
        if isinstance(reason, BaseException) and id(reason) not in seen:
            current = reason
            continue
        if current.args and isinstance(current.args[0], BaseException):
            current = current.args[0]
            continue
        current = current.__cause__ or current.__context__
    return False


__all__ = [
    "ListResponse",
    "PagedResponse",
    "RemoteItem",
    "TodoApiClient",
    "TodosResponse",
    "parse_item",
    "parse_todos_response",
]
