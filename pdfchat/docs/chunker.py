"""Document chunker - deterministic fixed-window text splitting."""

DEFAULT_CHUNK_SIZE = 2000


def chunk_document(
    text: str,
    *,
    max_chars: int = DEFAULT_CHUNK_SIZE,
) -> list[tuple[int, str]]:
    """Chunk document text into ordered fixed-size windows.

    Pure function with no I/O or randomness. Windows do not overlap and ignore
    word or sentence boundaries, so a token may be split across two chunks.

    Args:
        text: Extracted document text
        max_chars: Window length in characters (default 2000)

    Returns:
        List of (chunk_index, chunk_text) tuples where:
        - chunk_index is 0-based, contiguous
        - there are ceil(len(text) / max_chars) chunks
        - only the last chunk may be shorter than max_chars
        - concatenating chunk_text in order reproduces ``text`` exactly

        Empty or whitespace-only text yields no chunks.

    Raises:
        ValueError: If max_chars is not positive
    """
    if max_chars <= 0:
        raise ValueError(f"max_chars must be positive, got {max_chars}")

    if not text or not text.strip():
        return []

    return [
        (chunk_index, text[start : start + max_chars])
        for chunk_index, start in enumerate(range(0, len(text), max_chars))
    ]
