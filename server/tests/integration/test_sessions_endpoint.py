from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from calc_app.core.config import get_settings
from calc_app.main import create_app
from calc_app.services.sessions import engine_store

SESSION_ID = "keypad-session"


@pytest.fixture()
def client():
    engine_store.clear(SESSION_ID)
    get_settings.cache_clear()

    with TestClient(create_app()) as test_client:
        yield test_client

    engine_store.clear(SESSION_ID)
    get_settings.cache_clear()


def type_keys(client: TestClient, *keys: str) -> dict:
    payload: dict = {}
    for key in keys:
        if key == ".":
            response = client.post(f"/sessions/{SESSION_ID}/decimal")
        elif key in ("+", "-", "*", "/"):
            response = client.post(f"/sessions/{SESSION_ID}/operators", json={"symbol": key})
        else:
            response = client.post(f"/sessions/{SESSION_ID}/digits", json={"digit": key})
        assert response.status_code == 200
        payload = response.json()
    return payload


def test_new_session_is_empty(client: TestClient) -> None:
    response = client.get(f"/sessions/{SESSION_ID}")

    assert response.status_code == 200
    assert response.json() == {"sessionId": SESSION_ID, "expression": "", "tokens": []}


def test_keys_build_expression(client: TestClient) -> None:
    state = type_keys(client, "3", ".", "1", "+", "*", "4")

    assert state["expression"] == "3.1 * 4"
    assert state["tokens"] == ["3.1", "*", "4"]


def test_digit_endpoint_rejects_non_digits(client: TestClient) -> None:
    response = client.post(f"/sessions/{SESSION_ID}/digits", json={"digit": "a"})

    assert response.status_code == 422


def test_unknown_operator_leaves_state_unchanged(client: TestClient) -> None:
    type_keys(client, "7")

    response = client.post(f"/sessions/{SESSION_ID}/operators", json={"symbol": "^"})

    assert response.status_code == 200
    assert response.json()["tokens"] == ["7"]


def test_evaluate_respects_precedence_and_loads_result(client: TestClient) -> None:
    type_keys(client, "2", "+", "3", "*", "4")

    response = client.post(f"/sessions/{SESSION_ID}/evaluate")

    assert response.status_code == 200
    payload = response.json()
    assert payload["expression"] == "2 + 3 * 4"
    assert payload["result"] == 14
    assert payload["display"] == "14"
    assert payload["state"]["tokens"] == ["14"]


def test_chained_computation(client: TestClient) -> None:
    type_keys(client, "2", "+", "2")
    first = client.post(f"/sessions/{SESSION_ID}/evaluate").json()
    assert first["result"] == 4

    type_keys(client, "+", "6")
    second = client.post(f"/sessions/{SESSION_ID}/evaluate").json()

    assert second["expression"] == "4 + 6"
    assert second["result"] == 10


def test_evaluate_failure_keeps_state(client: TestClient) -> None:
    type_keys(client, "5", "/", "0")

    response = client.post(f"/sessions/{SESSION_ID}/evaluate")

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["type"] == "CALCULATOR_ERROR"
    assert error["message"] == "Division by zero is not allowed."
    assert error["details"] == {"reason": "division_by_zero"}
    assert client.get(f"/sessions/{SESSION_ID}").json()["expression"] == "5 / 0"


@pytest.mark.parametrize(
    ("keys", "reason"),
    [
        ((), "empty"),
        (("3", "+"), "incomplete_expression"),
        (("-", "5"), "invalid_expression"),
    ],
)
def test_evaluate_failure_reasons(client: TestClient, keys: tuple[str, ...], reason: str) -> None:
    type_keys(client, *keys)

    response = client.post(f"/sessions/{SESSION_ID}/evaluate")

    assert response.status_code == 400
    assert response.json()["error"]["details"]["reason"] == reason


def test_input_endpoint_accepts_literals_and_aliases(client: TestClient) -> None:
    for text in ["-1,5", "mult", "4"]:
        response = client.post(f"/sessions/{SESSION_ID}/input", json={"text": text})
        assert response.status_code == 200

    response = client.post(f"/sessions/{SESSION_ID}/evaluate")

    assert response.json()["result"] == -6


def test_input_endpoint_rejects_unknown_text(client: TestClient) -> None:
    type_keys(client, "8")

    response = client.post(f"/sessions/{SESSION_ID}/input", json={"text": "banana"})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["type"] == "INPUT_REJECTED"
    assert error["traceId"] == response.headers["X-Request-ID"]
    assert client.get(f"/sessions/{SESSION_ID}").json()["tokens"] == ["8"]


def test_reset_clears_session(client: TestClient) -> None:
    type_keys(client, "9", "-", "1")

    response = client.delete(f"/sessions/{SESSION_ID}")

    assert response.status_code == 204
    assert engine_store.get(SESSION_ID) is None
    assert client.get(f"/sessions/{SESSION_ID}").json()["tokens"] == []


def test_comma_locale_formats_display(monkeypatch) -> None:
    monkeypatch.setenv("DECIMAL_SEPARATOR", ",")
    get_settings.cache_clear()
    engine_store.clear(SESSION_ID)

    try:
        client = TestClient(create_app())
        type_keys(client, "5", "/", "2")
        response = client.post(f"/sessions/{SESSION_ID}/evaluate")
    finally:
        engine_store.clear(SESSION_ID)
        get_settings.cache_clear()

    payload = response.json()
    assert payload["result"] == 2.5
    assert payload["display"] == "2,5"
    assert payload["state"]["tokens"] == ["2,5"]


def test_reading_unknown_session_does_not_create_engine(client: TestClient) -> None:
    response = client.get("/sessions/never-typed")

    assert response.status_code == 200
    assert response.json() == {"sessionId": "never-typed", "expression": "", "tokens": []}
    assert engine_store.get("never-typed") is None
