"""Exporter - render a chat ledger as a paginated PDF.

Line breaking, pagination and glyph fallback for non-Latin scripts are left to
PyMuPDF's Story layout engine.
"""

import html
import io
from collections.abc import Sequence
from uuid import UUID

import fitz  # PyMuPDF
from sqlalchemy.ext.asyncio import AsyncSession

from pdfchat.db.context import RequestContext
from pdfchat.db.repositories import HistoryRepository
from pdfchat.errors import NotFoundError
from pdfchat.models.chat import ChatMessage

MEDIABOX = fitz.paper_rect("letter")
MARGIN = 50
CONTENT = MEDIABOX + (MARGIN, MARGIN, -MARGIN, -MARGIN)
TITLE = "Chat History"

# Base-14 metrics used to measure tokens against the line width
FONT = "helv"
FONT_SIZE = 12

_CSS = """
body { font-family: sans-serif; font-size: 12pt; }
h1 { font-size: 16pt; font-weight: normal; text-decoration: underline; margin: 0 0 12pt 0; }
p { margin: 0 0 2pt 0; }
p.q { color: blue; }
p.a { color: black; margin-bottom: 12pt; }
"""


def _width(text: str) -> float:
    return fitz.get_text_length(text, fontname=FONT, fontsize=FONT_SIZE)


def _fit_token(token: str, max_width: float) -> list[str]:
    """Split a token wider than ``max_width`` points into pieces that each fit."""
    if _width(token) <= max_width:
        return [token]

    pieces: list[str] = []
    current = ""
    for ch in token:
        candidate = current + ch
        if current and _width(candidate) > max_width:
            pieces.append(current)
            current = ch
        else:
            current = candidate
    if current:
        pieces.append(current)
    return pieces


def _paragraph(text: str, css_class: str) -> str:
    # Story only breaks at spaces; a single token wider than the line would overflow
    max_width = CONTENT.width * 0.9
    lines = []
    for line in text.splitlines() or [""]:
        tokens = [piece for token in line.split(" ") for piece in _fit_token(token, max_width)]
        lines.append(html.escape(" ".join(tokens)))
    return f'<p class="{css_class}">{"<br/>".join(lines)}</p>'


def history_html(messages: Sequence[ChatMessage]) -> str:
    """Title, then a Q line and an A line per message in stored order."""
    parts = [f"<h1>{html.escape(TITLE)}</h1>"]
    for idx, msg in enumerate(messages):
        parts.append(_paragraph(f"Q{idx + 1}: {msg.question}", "q"))
        parts.append(_paragraph(f"A: {msg.answer}", "a"))
    return "".join(parts)


def render_history_pdf(messages: Sequence[ChatMessage]) -> bytes:
    """Render messages onto letter pages, adding pages until the story is placed."""
    story = fitz.Story(html=history_html(messages), user_css=_CSS)
    buffer = io.BytesIO()
    writer = fitz.DocumentWriter(buffer)

    more = 1
    while more:
        device = writer.begin_page(MEDIABOX)
        more, _ = story.place(CONTENT)
        story.draw(device)
        writer.end_page()
    writer.close()

    return buffer.getvalue()


def export_filename(session_id: UUID) -> str:
    return f"chat_{session_id}.pdf"


async def export_history(
    *, ctx: RequestContext, session_id: UUID, session: AsyncSession
) -> bytes:
    """Render a session's ledger.

    Raises:
        NotFoundError: No ledger recorded for the session
    """
    messages = await HistoryRepository(session).get_messages(ctx, session_id)
    if messages is None:
        raise NotFoundError("Chat history not found")
    return render_history_pdf(messages)
