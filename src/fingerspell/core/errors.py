"""
Exceptions raised by fingerspell.

Library reads (feature extraction, classification, store loads) fail soft and
never raise these. Only model loading and explicit user actions (save, clear,
import, sample capture) surface them to the caller.
"""


class FingerspellError(Exception):
    """Base class for all fingerspell errors."""


class ModelLoadError(FingerspellError):
    """The hand landmark model could not be loaded. Fatal for the session."""


class StorageWriteError(FingerspellError):
    """A write to the key-value storage did not happen."""


class InvalidImportError(FingerspellError, ValueError):
    """An imported reference set is not valid JSON or not a list of entries."""


class TrainingError(FingerspellError, ValueError):
    """A training action was requested in a state that does not allow it."""
