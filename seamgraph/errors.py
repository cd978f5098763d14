"""Exceptions raised by the seam carving core."""


class SeamCarvingError(Exception):
    """Base class for all seam carving errors."""


class MalformedSeamError(SeamCarvingError, RuntimeError):
    """A seam no longer matches the adjacency of the grid it was found on.

    Raised by the graph surgery when an entry's predecessor is neither
    directly above, above-left nor above-right of it. The grid is left
    untouched.
    """


class MalformedGridError(SeamCarvingError, RuntimeError):
    """The pixel graph failed a consistency check."""


class InvalidDimensionsError(SeamCarvingError, ValueError):
    """Sizes or buffers passed in at the API boundary are unusable."""
