from __future__ import annotations


class ProviderError(Exception):
    """An AI provider call failed or returned nothing usable."""


class WorkflowError(Exception):
    """The workflow webhook rejected or failed a request."""


class GenerationError(Exception):
    """A generation finished with an error result."""


class GenerationTimeoutError(GenerationError):
    def __init__(self, message: str = "Request timed out. Please try again."):
        super().__init__(message)
