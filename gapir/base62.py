"""Base62 encoding for short pull request links (digits, a-z, then A-Z)."""

BASE62_CHARS = '0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ'
BASE = len(BASE62_CHARS)


def encode(value: int) -> str:
    """Encode a non-negative integer.

    Raises:
        ValueError: If value is negative
    """
    if value < 0:
        raise ValueError("Value must be non-negative")
    if value == 0:
        return BASE62_CHARS[0]

    chars = []
    while value > 0:
        value, remainder = divmod(value, BASE)
        chars.append(BASE62_CHARS[remainder])
    return ''.join(reversed(chars))


def decode(text: str) -> int:
    """Decode a Base62 string.

    Raises:
        ValueError: If text is empty or contains a character outside the alphabet
    """
    if not text:
        raise ValueError("Base62 string cannot be empty")

    result = 0
    for ch in text:
        index = BASE62_CHARS.find(ch)
        if index == -1:
            raise ValueError(f"Invalid Base62 character: {ch!r}")
        result = result * BASE + index
    return result


def is_valid_base62(text: str) -> bool:
    return bool(text) and all(ch in BASE62_CHARS for ch in text)


def is_decimal(text: str) -> bool:
    return bool(text) and all('0' <= ch <= '9' for ch in text)


def resolve_pull_request_id(text: str) -> int:
    """Turn a short link id into a pull request id.

    Decimal strings are taken as they are, anything else must be Base62.

    Raises:
        ValueError: If text is neither decimal nor valid Base62
    """
    text = (text or '').strip()
    if is_decimal(text):
        return int(text)
    if is_valid_base62(text):
        return decode(text)
    raise ValueError(f"Invalid pull request id: {text!r}")
