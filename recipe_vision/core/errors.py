"""Error taxonomy for the generation request pipeline.

Every failure raised below the orchestrator is one of these classes. The
orchestrator catches them at its boundary and renders a single user-visible
string via `describe_error`; nothing propagates to the adapters.
"""

ERROR_PREFIX = "Error: "
UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"


class PipelineError(Exception):
    """Base class for classified pipeline failures."""


class FetchError(PipelineError):
    """Resource could not be retrieved (bad reference, network, non-success status)."""


class EncodingError(PipelineError):
    """Retrieved bytes could not be transcoded to the transport encoding."""


class ServiceError(PipelineError):
    """External generation call failed or returned a non-success indication."""


class UnknownError(PipelineError):
    """Any other failure, wrapped with its original description."""

    @classmethod
    def wrap(cls, exc: BaseException) -> "UnknownError":
        return cls(str(exc))


class UnknownReferenceError(ValueError):
    """Raised by strict selection for references missing from the catalog."""


def classify_error(exc: BaseException) -> PipelineError:
    """Return `exc` unchanged when already classified, else wrap it."""
    if isinstance(exc, PipelineError):
        return exc
    return UnknownError.wrap(exc)


def describe_error(exc: BaseException) -> str:
    """Build the user-visible failure message.

    Returns:
        `"Error: <message>"`, or `"Error: Unknown error occurred"` when the
        error carries no message.
    """
    message = str(classify_error(exc)).strip()
    return f"{ERROR_PREFIX}{message or UNKNOWN_ERROR_MESSAGE}"
