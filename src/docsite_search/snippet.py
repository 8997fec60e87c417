"""Snippet extraction for search result previews."""

ELLIPSIS = "..."


def generate_snippet(content: str, match_position: int, context_length: int) -> str:
    """Extract the text surrounding a match.

    The window spans ``context_length`` characters on each side of the match
    position, clipped to the content. An ellipsis marks each side where the
    window stops short of the content boundary.

    Args:
        content: Full text of the field the match was found in.
        match_position: Character offset of the match.
        context_length: Characters of context on each side.

    Returns:
        Snippet text, empty when the content or the window is empty.
    """
    length = len(content)
    start = max(0, match_position - context_length)
    end = min(length, match_position + context_length)
    if not content or end <= start:
        return ""

    snippet = content[start:end]
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < length:
        snippet += ELLIPSIS
    return snippet
