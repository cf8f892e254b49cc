"""Text helpers for report output."""


def truncate_subject(subject: str | None, max_length: int = 50) -> str:
    """
    Truncate subject to max_length with '...' if needed.

    Args:
        subject: Subject line text
        max_length: Maximum length (default 50)

    Returns:
        Truncated subject with ellipsis if needed

    Examples:
        >>> truncate_subject("Short subject")
        'Short subject'
        >>> truncate_subject("This is a very long subject that exceeds the maximum length", 30)
        'This is a very long subject ...'
    """
    if not subject:
        return ""

    if len(subject) <= max_length:
        return subject

    return subject[: max_length - 3] + "..."


def strip_brackets(value: str) -> str:
    """
    Remove one leading '[' and one trailing ']' and surrounding whitespace.

    Examples:
        >>> strip_brackets("[10.0.0.1]")
        '10.0.0.1'
        >>> strip_brackets(" mx.example.com ")
        'mx.example.com'
    """
    text = value.strip()
    if text.startswith("["):
        text = text[1:]
    if text.endswith("]"):
        text = text[:-1]
    return text.strip()
