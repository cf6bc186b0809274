"""
LLM-specific exceptions.
"""


class ContextOverflowError(Exception):
    """
    Raised when the request exceeds the model's context window.

    Retrying the same request cannot succeed, so providers raise this
    immediately instead of returning None.
    """
    pass
