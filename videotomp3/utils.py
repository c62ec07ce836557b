import re
from urllib.parse import urlsplit, urlunsplit

from .exceptions import ValidationError
from .logger import get_logger

logger = get_logger(__name__)

YOUTUBE_HOSTS = ("youtube.com", "youtu.be")

# Whitespace and control characters never appear in a URL we pass on
_UNSAFE_CHARS = re.compile(r'[\s\x00-\x1f\x7f]')


def parse_url(text):
    """
    Parse text as an absolute URL.

    Args:
        text: The string to parse

    Returns:
        urllib.parse.SplitResult with a scheme and a network location

    Raises:
        ValidationError: If the text is not a string or does not parse
    """
    if not isinstance(text, str):
        raise ValidationError(f"URL must be a string, not {type(text).__name__}")

    cleaned = text.strip()
    if not cleaned:
        raise ValidationError("URL is empty")
    if _UNSAFE_CHARS.search(cleaned):
        raise ValidationError("URL contains whitespace or control characters")

    try:
        parts = urlsplit(cleaned)
        # Accessing the port validates it
        parts.port
    except ValueError as e:
        raise ValidationError(f"URL does not parse: {e}") from e

    if not parts.scheme or not parts.netloc or not parts.hostname:
        raise ValidationError(f"Not an absolute URL: {cleaned}")
    return parts


def is_youtube_url(text):
    """
    Check whether text looks like a YouTube link.

    Only the host is looked at: anything that parses and whose hostname
    contains youtube.com or youtu.be qualifies. Never raises.
    """
    if not text:
        return False
    try:
        parts = parse_url(text)
    except ValidationError as e:
        logger.debug(f"Not a YouTube URL ({e})")
        return False
    return any(host in parts.hostname for host in YOUTUBE_HOSTS)


def sanitize_url(text):
    """
    Return a normalized form of text that is safe to pass to yt-dlp as an
    argument, or "" when text is not an absolute URL.
    """
    try:
        parts = parse_url(text)
    except ValidationError as e:
        logger.debug(f"URL rejected by sanitizer: {e}")
        return ""
    return urlunsplit(parts)
