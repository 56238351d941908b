"""Migration script splitting."""

TERMINATOR = ";"


def _is_comment_only(chunk: str) -> bool:
    """True if a chunk holds nothing but SQL comments and whitespace."""
    remaining = chunk
    while remaining:
        remaining = remaining.lstrip()
        if remaining.startswith("--"):
            newline = remaining.find("\n")
            remaining = "" if newline == -1 else remaining[newline + 1 :]
        elif remaining.startswith("/*"):
            close = remaining.find("*/", 2)
            remaining = "" if close == -1 else remaining[close + 2 :]
        else:
            return not remaining
    return True


def _chunks(script: str) -> list[str]:
    """Split on terminators that are not inside quotes or comments."""
    chunks: list[str] = []
    current: list[str] = []
    quote: str | None = None
    i = 0
    while i < len(script):
        char = script[i]
        pair = script[i : i + 2]

        if quote is not None:
            current.append(char)
            if char == quote:
                quote = None
        elif char in ("'", '"', "`"):
            quote = char
            current.append(char)
        elif pair == "--":
            end = script.find("\n", i)
            end = len(script) if end == -1 else end
            current.append(script[i:end])
            i = end
            continue
        elif pair == "/*":
            end = script.find("*/", i + 2)
            end = len(script) if end == -1 else end + 2
            current.append(script[i:end])
            i = end
            continue
        elif char == TERMINATOR:
            chunks.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    chunks.append("".join(current))
    return chunks


def split_statements(script: str) -> list[str]:
    """Split a migration into terminated statements, in source order.

    Blank (or comment-only) statements are dropped. Each returned statement is
    trimmed and ends with the terminator. A script with content that yields no
    statements, such as one made only of comments, comes back whole: trimmed
    and terminated.
    """
    statements = []
    for chunk in _chunks(script):
        statement = chunk.strip()
        if not statement or _is_comment_only(statement):
            continue
        statements.append(f"{statement}{TERMINATOR}")

    trimmed = script.strip()
    if not statements and trimmed:
        if not trimmed.endswith(TERMINATOR):
            trimmed = f"{trimmed}{TERMINATOR}"
        statements.append(trimmed)
    return statements
