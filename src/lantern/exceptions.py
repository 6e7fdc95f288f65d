"""Error taxonomy for the driver extension.

Every failure a command can hit is a `LanternError`; the dispatcher renders
these into error envelopes with `str(exc)` as the message.
"""

from __future__ import annotations


class NeverRaise(RuntimeError):
    """Sentinel exception for code paths that should be unreachable.

    Raising this exception signals a broken internal contract rather than a
    bad request. The dispatcher still converts it into an error envelope, so a
    single faulty command never takes the extension down.
    """

    def __init__(self, message: str, *, env: dict[str, object] | None = None):
        super().__init__(message)
        self.env = dict(env or {})


class NeverThrown(NeverRaise):
    """Alias for NeverRaise used by the explicit never() marker."""


class LanternError(Exception):
    """Base class for failures reported back to the driver."""


class MalformedCommand(LanternError):
    """The raw command could not be decoded into a typed command."""


class UnknownCommand(MalformedCommand):
    """No command is registered under the requested kind."""

    def __init__(self, kind: object):
        super().__init__(f"Extension command not recognized: {kind!r}")
        self.kind = kind


class NoMatchingElement(LanternError):
    def __init__(self, finder_description: str):
        super().__init__(
            f"Bad state: No element; no matching element for {finder_description}"
        )
        self.finder_description = finder_description


class FinderTimeout(NoMatchingElement):
    """A polled search ran out of time.

    The message is identical to `NoMatchingElement`: on the wire a timed-out
    search is indistinguishable from one that never matched.
    """

    def __init__(self, finder_description: str, *, timeout_ms: int):
        super().__init__(finder_description)
        self.timeout_ms = timeout_ms


class AmbiguousMatch(LanternError):
    def __init__(self, finder_description: str, *, count: int):
        super().__init__(
            "Bad state: Too many elements; "
            f"too many matching elements for {finder_description} ({count} found)"
        )
        self.finder_description = finder_description
        self.count = count


class ElementStillPresent(LanternError):
    def __init__(self, finder_description: str, *, timeout_ms: int):
        super().__init__(
            f"Timed out after {timeout_ms}ms waiting for {finder_description} "
            "to disappear"
        )
        self.finder_description = finder_description
        self.timeout_ms = timeout_ms


class MissingSemantics(LanternError):
    def __init__(self, finder_description: str):
        super().__init__(
            f"Bad state: No semantics data found for {finder_description}"
        )


class UnsupportedElement(LanternError):
    """The matched node cannot answer the request (no text, no layout...)."""


class RequestHandlerMissing(LanternError):
    def __init__(self) -> None:
        super().__init__("No RequestData handler registered")


class SnapshotError(LanternError):
    """A tree snapshot file is not in the expected shape."""
