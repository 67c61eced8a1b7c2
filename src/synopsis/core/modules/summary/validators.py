"""Pure validation functions for summary fields."""

from synopsis.errors import ValidationError

MAX_NOTE_LENGTH = 20_000
MAX_SUMMARY_LENGTH = 8_000
MAX_TAGS = 10


def _validate_text(name: str, value: str, max_length: int) -> str:
    if not 1 <= len(value) <= max_length:
        raise ValidationError(f"'{name}' must be between 1 and {max_length} characters")
    return value


def validate_note(note: str) -> str:
    return _validate_text("note", note, MAX_NOTE_LENGTH)


def validate_summary(summary: str) -> str:
    return _validate_text("summary", summary, MAX_SUMMARY_LENGTH)


def clean_tags(tags: list[str]) -> list[str]:
    """Trim tags, drop blank ones and duplicates while preserving first occurrence order.

    Raises:
        ValidationError: If more than MAX_TAGS tags are given
    """
    if len(tags) > MAX_TAGS:
        raise ValidationError(f"At most {MAX_TAGS} tags are allowed")

    cleaned = [tag.strip() for tag in tags]
    return list(dict.fromkeys(tag for tag in cleaned if tag))
