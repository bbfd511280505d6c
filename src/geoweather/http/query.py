"""
=============================================================================
QUERY STRING DECODER
=============================================================================

Extracts a single parameter from a URL query string.

    /api/v1/geo?city=Malmo%20City&x=1
                ──────────────────────
                     query string

    "city=Malmo%20City&x=1"
      │         │
      │         └─ raw value "Malmo%20City" ──percent_decode──► "Malmo City"
      └─ key, compared byte-for-byte (never decoded)

=============================================================================
SCAN RULES
=============================================================================

1. Pairs are separated by "&"; each pair splits on its FIRST "=".
2. The first pair whose key matches wins. Later duplicates are ignored.
3. A pair without "=" stops the scan. Anything after it is never looked
   at, so "flag&city=Malmo" does not find city. Existing clients depend
   on this, so it stays.
4. Values longer than the caller's limit are rejected, never truncated.

=============================================================================
PERCENT DECODING
=============================================================================

    "%41"  → "A"       two hex digits become one byte
    "+"    → " "       form-style space
    "%zz"  → "%zz"     malformed escapes pass through untouched
    "%C3%B6" → "ö"     decoded bytes are read as UTF-8

We decode by hand rather than with urllib.parse.unquote_plus because the
scan rules above (halt on a bare key, first match only, raw key compare)
are not what parse_qs does.

=============================================================================
"""

import string
from typing import Optional


_HEX_DIGITS = frozenset(string.hexdigits)


class QueryParamTooLong(ValueError):
    """
    Raised when a decoded query value exceeds the allowed length.

    Carries the offending key and the limit so the server can tell the
    client exactly which parameter was rejected.
    """

    def __init__(self, key: str, max_length: int):
        super().__init__(f"query param too long: {key} (max {max_length})")
        self.key = key
        self.max_length = max_length


def percent_decode(value: str) -> str:
    """
    Decode %XX escapes and '+' in a query value.

    Args:
        value: Raw value as it appeared in the query string.

    Returns:
        Decoded text. Bytes that are not valid UTF-8 become U+FFFD.
    """
    out = bytearray()
    i = 0
    n = len(value)

    while i < n:
        ch = value[i]
        if (
            ch == "%"
            and i + 2 < n
            and value[i + 1] in _HEX_DIGITS
            and value[i + 2] in _HEX_DIGITS
        ):
            out.append(int(value[i + 1:i + 3], 16))
            i += 3
            continue

        if ch == "+":
            out.append(0x20)
        else:
            out.extend(ch.encode("utf-8"))
        i += 1

    return out.decode("utf-8", errors="replace")


def get_query_param(
    query: Optional[str],
    key: str,
    max_length: Optional[int] = None,
) -> Optional[str]:
    """
    Return the first decoded value for ``key``, or None if absent.

    Args:
        query: Query string without the leading "?" (None if the request
               target had no "?").
        key: Parameter name, matched exactly.
        max_length: Maximum decoded length. None means unlimited.

    Returns:
        The decoded value, or None when the key was not found before the
        scan stopped.

    Raises:
        QueryParamTooLong: If the decoded value is longer than max_length.
    """
    if query is None:
        return None

    for pair in query.split("&"):
        name, sep, raw_value = pair.partition("=")
        if not sep:
            # Bare key without "=": stop scanning entirely
            return None

        if name != key:
            continue

        value = percent_decode(raw_value)
        if max_length is not None and len(value) > max_length:
            raise QueryParamTooLong(key, max_length)
        return value

    return None
