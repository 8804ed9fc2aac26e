"""Error kinds raised by the deconstruct core."""


class DeconstructError(Exception):
    """Base exception for the deconstruct backend."""

    pass


class ValidationError(DeconstructError):
    """Uploaded file or user input rejected before the core runs."""

    def __init__(self, message: str, too_large: bool = False):
        super().__init__(message)
        self.too_large = too_large


class EncodingError(DeconstructError):
    """Media could not be read or encoded."""

    pass


class TransportError(DeconstructError):
    """The external AI call failed."""

    pass


class RequestTimeoutError(TransportError):
    """The external AI call did not answer in time."""

    pass


class ParseError(DeconstructError):
    """The external AI response was empty or malformed."""

    pass


class InvalidTransition(DeconstructError):
    """Workflow operation not allowed in the current step."""

    pass


class NoActiveBrief(DeconstructError):
    """Brief operation requested before an analysis result exists."""

    pass
