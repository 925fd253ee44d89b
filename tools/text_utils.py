"""Text helpers shared by the generation workflows."""

ERROR_MARKER_PREFIX = "// ERROR:"
TRANSLATION_ERROR_PREFIX = "[Translation Error]"


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(text.split())


def error_marker(message: str) -> str:
    """Inline marker written into a node whose generation failed."""
    return f"{ERROR_MARKER_PREFIX} {message}"


def is_error_marker(content: str) -> bool:
    return content.startswith(ERROR_MARKER_PREFIX)


def translation_error_marker(original: str) -> str:
    return f"{TRANSLATION_ERROR_PREFIX} {original}"


def join_keywords(keywords: list[str]) -> str:
    """Comma-join non-blank keywords."""
    return ", ".join(k.strip() for k in keywords if k and k.strip())
