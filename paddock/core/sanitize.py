import bleach

from paddock.core.config import settings


def sanitize_text(content: str, max_length: int | None = None) -> str:
    """
    Escapes any markup in user-provided text before it is stored.

    No tags are allowed; with ``strip=False`` bleach escapes them instead of
    dropping them, so the text the user typed is preserved verbatim once rendered.
    ``max_length`` counts the characters the user typed, not the escaped output.
    """
    if not isinstance(content, str):
        return ""

    content = content.strip()
    # Cut before escaping so an entity is never split
    if max_length and len(content) > max_length:
        content = content[:max_length]

    return bleach.clean(content, tags=[], attributes={}, strip=False)


def sanitize_message(content: str) -> str:
    return sanitize_text(content, settings.MESSAGE_MAX_LENGTH)
