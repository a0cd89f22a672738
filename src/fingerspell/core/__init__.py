"""
Core configuration, errors and language definitions.
Session state lives in src.fingerspell.core.session_manager.
"""
from src.fingerspell.core import config
from src.fingerspell.core.errors import (
    FingerspellError,
    ModelLoadError,
    StorageWriteError,
    InvalidImportError,
    TrainingError,
)
from src.fingerspell.core.languages import SignLanguage, parse_language

__all__ = [
    'config',
    'FingerspellError',
    'ModelLoadError',
    'StorageWriteError',
    'InvalidImportError',
    'TrainingError',
    'SignLanguage',
    'parse_language',
]
