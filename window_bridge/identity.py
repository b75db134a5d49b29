"""Composite window identity.

A window is addressed as ``"<appName>-<title>"``.  Untitled windows get the
synthetic title ``"window-<index>"`` where *index* is the window's position in
its process's window list at enumeration time.

Decoding splits at the first separator, so an app name that itself contains
``"-"`` decodes ambiguously ("Foo-Bar-Doc" → app "Foo", title "Bar-Doc").
That behaviour is kept as observed; callers needing exactness must avoid such
app names.
"""

from __future__ import annotations

from typing import NamedTuple

from window_bridge.exceptions import MalformedIdentityError
from window_bridge.protocol.constants import ID_SEPARATOR, SYNTHETIC_TITLE_PREFIX


class DecodedIdentity(NamedTuple):
    app_name: str
    title: str


def synthetic_title(index: int) -> str:
    return f"{SYNTHETIC_TITLE_PREFIX}{index}"


def encode(app_name: str, title: str | None, index: int = 0) -> str:
    """Build the composite id for a window.

    An empty or missing *title* is replaced by ``window-<index>``.
    """
    return f"{app_name}{ID_SEPARATOR}{title or synthetic_title(index)}"


def decode(window_id: str) -> DecodedIdentity:
    """Split *window_id* at the first separator.

    ``encode`` never produces an empty app name or title, so ids like
    ``"Terminal-"`` are rejected rather than matched against untitled windows.

    Raises:
        MalformedIdentityError: If the id contains no separator or either
            side of it is empty.
    """
    app_name, sep, title = window_id.partition(ID_SEPARATOR)
    if not sep:
        raise MalformedIdentityError(window_id)
    if not app_name:
        raise MalformedIdentityError(window_id, "has an empty app name")
    if not title:
        raise MalformedIdentityError(window_id, "has an empty title")
    return DecodedIdentity(app_name, title)


def synthetic_index(title: str) -> str | None:
    """Return the positional token of a synthetic title, else None.

    Any title containing ``"window-"`` qualifies; the token is whatever
    follows the last separator, so ``"my-window-3"`` yields ``"3"``.
    """
    if SYNTHETIC_TITLE_PREFIX not in title:
        return None
    return title.rsplit(ID_SEPARATOR, 1)[-1]
