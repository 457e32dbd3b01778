"""Pure functions for ``{{key}}`` placeholder expansion.

Expansion is all-or-nothing: if any placeholder in a body has no value the
body is returned exactly as written, so a half-filled command is never shown
or executed.  An opening ``{{`` with no closing ``}}`` is ordinary text.
"""

from cmdstash.errors import UnresolvedPlaceholders

OPEN = "{{"
CLOSE = "}}"


def _scan(body: str, values: dict[str, str]) -> tuple[str, list[str]]:
    """Substitute placeholders left to right.

    Returns the substituted text and the keys that had no value, in order of
    appearance.  Unresolved tokens are copied back literally.
    """
    out: list[str] = []
    missing: list[str] = []
    cursor = 0
    while True:
        start = body.find(OPEN, cursor)
        if start == -1:
            break
        out.append(body[cursor:start])
        key_start = start + len(OPEN)
        end = body.find(CLOSE, key_start)
        if end == -1:
            # Unterminated: the rest of the body is literal text.
            out.append(body[start:])
            cursor = len(body)
            break
        key = body[key_start:end]
        if key in values:
            out.append(values[key])
        else:
            missing.append(key)
            out.append(f"{OPEN}{key}{CLOSE}")
        cursor = end + len(CLOSE)
    out.append(body[cursor:])
    return "".join(out), missing


def expand(body: str, values: dict[str, str] | None) -> str:
    """Return ``body`` with every placeholder filled in from ``values``.

    Returns ``body`` unchanged when ``values`` is None (no environment in
    effect) or when at least one placeholder cannot be resolved.
    """
    if values is None:
        return body
    expanded, missing = _scan(body, values)
    return body if missing else expanded


def expand_strict(body: str, values: dict[str, str] | None) -> str:
    """Like ``expand`` but raise UnresolvedPlaceholders instead of falling back."""
    expanded, missing = _scan(body, values or {})
    if missing:
        raise UnresolvedPlaceholders(list(dict.fromkeys(missing)))
    return expanded


def placeholders(body: str) -> list[str]:
    """Return the placeholder keys referenced in ``body``, first occurrence first."""
    _, missing = _scan(body, {})
    return list(dict.fromkeys(missing))
