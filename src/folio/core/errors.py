"""Error taxonomy for content resolution.

NotFoundError is raised for every kind of rejected or missing path, so a
client cannot tell a traversal attempt apart from a missing file.
"""


class ContentError(Exception):
    """Base class for content errors."""


class NotFoundError(ContentError):
    """Path failed sanitization or containment, or does not exist."""

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message)


class IoFailure(ContentError):
    """Filesystem error other than a missing path.

    The originating OSError is chained as ``__cause__``.
    """

    @classmethod
    def from_os_error(cls, error: OSError) -> "IoFailure":
        failure = cls(f"I/O error: {error.strerror or error}")
        failure.__cause__ = error
        return failure


class AlreadyExistsError(ContentError):
    """Write target already exists and overwriting was refused."""


def translate_os_error(error: OSError) -> ContentError:
    """Map an OSError to NotFoundError or IoFailure."""
    if isinstance(error, (FileNotFoundError, NotADirectoryError)):
        return NotFoundError()
    return IoFailure.from_os_error(error)
