"""Helper functions for UI - PDF chat API client + pure view helpers."""

from typing import Any

import httpx

DEV_USER_ID = "00000000-0000-0000-0000-000000000002"


def get_auth_header(user_id: str = DEV_USER_ID) -> dict[str, str]:
    """Get auth header for API calls.

    Identity comes from an external provider; the dev UI sends a fixed user id.
    """
    return {"Authorization": f"Bearer {user_id}"}


def upload_pdfs(backend_url: str, files: list[tuple[str, bytes]]) -> dict[str, Any]:
    """POST /upload with (filename, bytes) pairs.

    Raises:
        httpx.HTTPStatusError: If request fails
    """
    response = httpx.post(
        f"{backend_url}/upload",
        files=[("files", (name, data, "application/pdf")) for name, data in files],
        headers=get_auth_header(),
        timeout=120.0,  # extraction of large batches
    )
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def list_sessions(backend_url: str) -> list[dict[str, Any]]:
    """GET /upload/sessions."""
    response = httpx.get(f"{backend_url}/upload/sessions", headers=get_auth_header(), timeout=30.0)
    response.raise_for_status()
    sessions: list[dict[str, Any]] = response.json()["sessions"]
    return sessions


def ask(backend_url: str, session_id: str, question: str) -> str:
    """POST /chat and return the answer text."""
    response = httpx.post(
        f"{backend_url}/chat",
        json={"chat_session_id": session_id, "question": question},
        headers=get_auth_header(),
        timeout=120.0,  # completion call blocks the request
    )
    response.raise_for_status()
    answer: str = response.json()["answer"]
    return answer


def fetch_history(backend_url: str, session_id: str) -> list[dict[str, Any]]:
    """GET /chat/{id}/history."""
    response = httpx.get(
        f"{backend_url}/chat/{session_id}/history", headers=get_auth_header(), timeout=30.0
    )
    response.raise_for_status()
    messages: list[dict[str, Any]] = response.json()["messages"]
    return messages


def rate(backend_url: str, session_id: str, message_index: int, rating: str) -> None:
    """POST /chat/{id}/rate."""
    response = httpx.post(
        f"{backend_url}/chat/{session_id}/rate",
        json={"message_index": message_index, "rating": rating},
        headers=get_auth_header(),
        timeout=30.0,
    )
    response.raise_for_status()


def export_pdf(backend_url: str, session_id: str) -> bytes:
    """GET /chat/{id}/export and return the PDF bytes."""
    response = httpx.get(
        f"{backend_url}/chat/{session_id}/export", headers=get_auth_header(), timeout=60.0
    )
    response.raise_for_status()
    return response.content


def toggle_archive(backend_url: str, session_id: str) -> bool:
    """POST /chat-sessions/{id}/archive and return the new flag."""
    response = httpx.post(
        f"{backend_url}/chat-sessions/{session_id}/archive",
        headers=get_auth_header(),
        timeout=30.0,
    )
    response.raise_for_status()
    archived: bool = response.json()["archived"]
    return archived


def delete_session(backend_url: str, session_id: str) -> None:
    """DELETE /chat-sessions/{id}."""
    response = httpx.delete(
        f"{backend_url}/chat-sessions/{session_id}", headers=get_auth_header(), timeout=30.0
    )
    response.raise_for_status()


# --- Pure view helpers ---


def find_already_uploaded(
    sessions: list[dict[str, Any]], filenames: list[str]
) -> list[str]:
    """Names among ``filenames`` that already appear in some session."""
    existing = {name for s in sessions for name in s.get("document_names", [])}
    return [name for name in filenames if name in existing]


def session_label(session: dict[str, Any]) -> str:
    """Sidebar label: document names, truncated, plus a count for the rest."""
    names = session.get("document_names", [])
    if not names:
        return "(no documents)"
    label = names[0] if len(names[0]) <= 40 else names[0][:37] + "..."
    if len(names) > 1:
        label += f" +{len(names) - 1} more"
    return label


def split_sessions(
    sessions: list[dict[str, Any]],
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Split into (active, archived), keeping order."""
    active = [s for s in sessions if not s.get("archived", False)]
    archived = [s for s in sessions if s.get("archived", False)]
    return active, archived


def rating_icon(rating: str | None) -> str:
    """Display marker for a message rating."""
    return {"up": "👍", "down": "👎"}.get(rating or "", "")


def error_message(exc: httpx.HTTPStatusError, fallback: str) -> str:
    """Pull the API's ``message`` out of an error response."""
    try:
        body = exc.response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        message = body.get("message") or body.get("detail")
        if isinstance(message, str):
            return message
    return fallback
