import socket

import pytest
import requests
from urllib3.exceptions import NameResolutionError

from core.errors import ErrorKind, MalformedResponseError, RemoteError, TransportError
from services.todo_api import (
    ListResponse,
    PagedResponse,
    TodoApiClient,
    parse_item,
    parse_todos_response,
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ""

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def client_for(response=None, error=None):
    session = FakeSession(response, error)
    return TodoApiClient("https://api.test/", timeout=3, session=session), session


def test_parse_paged_response():
    parsed = parse_todos_response(
        {
            "todos": [{"id": 1, "todo": "Buy milk", "completed": False, "userId": 4}],
            "total": 150,
            "skip": 0,
            "limit": 10,
        }
    )
    assert isinstance(parsed, PagedResponse)
    assert parsed.kind == "paged"
    assert parsed.total == 150
    assert parsed.limit == 10
    assert parsed.items[0].text == "Buy milk"
    assert parsed.items[0].user_id == 4


def test_parse_bare_list_uses_length_as_total():
    parsed = parse_todos_response([{"id": 1, "title": "A"}, {"id": 2, "title": "B", "completed": True}])
    assert isinstance(parsed, ListResponse)
    assert parsed.kind == "list"
    assert parsed.total == 2
    assert [item.text for item in parsed.items] == ["A", "B"]
    assert parsed.items[1].completed is True


def test_parse_items_container_and_missing_total():
    parsed = parse_todos_response({"items": [{"id": 3, "todo": "C"}]})
    assert isinstance(parsed, PagedResponse)
    assert parsed.total == 1


@pytest.mark.parametrize(
    "payload",
    [
        "not a list",
        {"total": 3},
        {"todos": "nope"},
        [{"id": "1", "todo": "string id"}],
        [42],
    ],
)
def test_malformed_payloads_raise(payload):
    with pytest.raises(MalformedResponseError) as excinfo:
        parse_todos_response(payload)
    assert excinfo.value.kind is ErrorKind.MALFORMED_RESPONSE


def test_parse_item_ignores_non_integer_user_id():
    assert parse_item({"id": 1, "todo": "x", "userId": "7"}).user_id is None


def test_get_todos_sends_limit_and_skip():
    api, session = client_for(FakeResponse(payload={"todos": [], "total": 0}))
    api.get_todos(limit=10, skip=20)

    method, url, kwargs = session.requests[0]
    assert method == "GET"
    assert url == "https://api.test/todos"
    assert kwargs["params"] == {"limit": 10, "skip": 20}
    assert kwargs["timeout"] == 3


def test_add_todo_posts_payload():
    api, session = client_for(
        FakeResponse(payload={"id": 255, "todo": "New task", "completed": False, "userId": 1})
    )
    item = api.add_todo("New task", False, 1)

    method, url, kwargs = session.requests[0]
    assert method == "POST"
    assert url == "https://api.test/todos/add"
    assert kwargs["json"] == {"todo": "New task", "completed": False, "userId": 1}
    assert item.id == 255


def test_timeout_maps_to_transport_timeout():
    api, _ = client_for(error=requests.exceptions.Timeout("slow"))
    with pytest.raises(TransportError) as excinfo:
        api.get_todos(10, 0)
    assert excinfo.value.kind is ErrorKind.TRANSPORT_TIMEOUT
    assert excinfo.value.retryable is True
    assert "try again later" in excinfo.value.message


def test_refused_connection():
    api, _ = client_for(error=requests.exceptions.ConnectionError("refused"))
    with pytest.raises(TransportError) as excinfo:
        api.get_todos(10, 0)
    assert excinfo.value.kind is ErrorKind.TRANSPORT_REFUSED


def test_name_resolution_failure_is_offline():
    cause = NameResolutionError("api.test", None, socket.gaierror("Name or service not known"))
    api, _ = client_for(error=requests.exceptions.ConnectionError(cause))
    with pytest.raises(TransportError) as excinfo:
        api.get_todos(10, 0)
    assert excinfo.value.kind is ErrorKind.TRANSPORT_OFFLINE
    assert "internet connection" in excinfo.value.message


@pytest.mark.parametrize(
    "status, kind, retryable",
    [
        (400, ErrorKind.REMOTE_4XX, False),
        (404, ErrorKind.REMOTE_4XX, False),
        (429, ErrorKind.REMOTE_4XX, True),
        (500, ErrorKind.REMOTE_5XX, True),
        (503, ErrorKind.REMOTE_5XX, True),
    ],
)
def test_http_status_classification(status, kind, retryable):
    api, _ = client_for(FakeResponse(status_code=status, payload={}))
    with pytest.raises(RemoteError) as excinfo:
        api.get_todos(10, 0)
    assert excinfo.value.status == status
    assert excinfo.value.kind is kind
    assert excinfo.value.retryable is retryable


def test_remote_message_prefers_payload():
    api, _ = client_for(FakeResponse(status_code=400, payload={"message": "Todo text missing"}))
    with pytest.raises(RemoteError) as excinfo:
        api.add_todo("", False, 1)
    assert excinfo.value.message == "Todo text missing"
    assert excinfo.value.to_dict() == {
        "code": "REMOTE_4XX",
        "message": "Todo text missing",
        "retryable": False,
    }


def test_invalid_json_body_is_malformed():
    api, _ = client_for(FakeResponse(status_code=200, payload=None, text="<html>"))
    with pytest.raises(MalformedResponseError):
        api.get_todos(10, 0)
