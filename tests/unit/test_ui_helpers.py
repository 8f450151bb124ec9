"""Unit tests for UI helper functions."""

from unittest.mock import MagicMock

import httpx

from ui.helpers import (
    error_message,
    find_already_uploaded,
    get_auth_header,
    rating_icon,
    session_label,
    split_sessions,
)


def _error(response: httpx.Response) -> httpx.HTTPStatusError:
    return httpx.HTTPStatusError("error", request=MagicMock(), response=response)


def test_get_auth_header_uses_bearer_user_id() -> None:
    assert get_auth_header("abc") == {"Authorization": "Bearer abc"}


def test_find_already_uploaded() -> None:
    sessions = [
        {"session_id": "s1", "document_names": ["a.pdf", "b.pdf"]},
        {"session_id": "s2", "document_names": ["c.pdf"]},
    ]

    assert find_already_uploaded(sessions, ["x.pdf", "c.pdf", "a.pdf"]) == ["c.pdf", "a.pdf"]
    assert find_already_uploaded([], ["a.pdf"]) == []


def test_session_label_single_document() -> None:
    assert session_label({"document_names": ["report.pdf"]}) == "report.pdf"


def test_session_label_counts_extra_documents() -> None:
    label = session_label({"document_names": ["a.pdf", "b.pdf", "c.pdf"]})

    assert label == "a.pdf +2 more"


def test_session_label_truncates_long_names() -> None:
    label = session_label({"document_names": ["x" * 50 + ".pdf"]})

    assert label == "x" * 37 + "..."


def test_session_label_no_documents() -> None:
    assert session_label({"document_names": []}) == "(no documents)"


def test_split_sessions_keeps_order() -> None:
    sessions = [
        {"session_id": "1", "archived": False},
        {"session_id": "2", "archived": True},
        {"session_id": "3", "archived": False},
    ]

    active, archived = split_sessions(sessions)

    assert [s["session_id"] for s in active] == ["1", "3"]
    assert [s["session_id"] for s in archived] == ["2"]


def test_rating_icon() -> None:
    assert rating_icon("up") == "👍"
    assert rating_icon("down") == "👎"
    assert rating_icon(None) == ""


def test_error_message_reads_api_message() -> None:
    exc = _error(httpx.Response(400, json={"message": "Only PDF files are allowed: a.txt"}))

    assert error_message(exc, "fallback") == "Only PDF files are allowed: a.txt"


def test_error_message_falls_back_on_non_json_body() -> None:
    exc = _error(httpx.Response(502, text="Bad Gateway"))

    assert error_message(exc, "Error getting answer.") == "Error getting answer."
