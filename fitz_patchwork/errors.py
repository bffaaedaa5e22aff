# fitz_patchwork/errors.py
"""
Exception types shared across fitz-patchwork.

Upstream and input errors abort a run. Extraction misses abort after the
raw response is shown. Parse errors in best-effort patch steps are caught
by the step that raised them and never reach the CLI.
"""


class PatchworkError(Exception):
    """Base class for all fitz-patchwork errors."""


class UpstreamError(PatchworkError):
    """The model call failed or returned no usable text."""


class InvalidInputError(PatchworkError):
    """A query, project path or edit path failed validation."""


class ExtractionMissError(PatchworkError):
    """No file/code pairs could be recovered from a model response."""

    def __init__(self, raw_response: str):
        super().__init__("No file/code pairs found in model response")
        self.raw_response = raw_response


class ComposeParseError(PatchworkError):
    """The composition file markup could not be parsed."""
