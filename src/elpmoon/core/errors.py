class ElpError(Exception):
    """Base error."""

class SeriesInputError(ElpError, ValueError):
    """Raised when a model, plan, budget or selector argument is malformed."""
