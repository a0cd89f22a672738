"""
Supported sign-language variants and their alphabets.
"""
from enum import Enum
from typing import List, Union

from src.fingerspell.core.config import (
    ALPHABETS,
    DEFAULT_LANGUAGE,
    LANGUAGE_NAMES,
    TRAINING_DATA_KEYS,
)


class SignLanguage(str, Enum):
    """A sign-language labeling scheme with its own data and defaults."""

    ASL = "ASL"
    FSL = "FSL"

    @property
    def letters(self) -> List[str]:
        """Letters of this language's alphabet, in display order."""
        return list(ALPHABETS[self.value])

    @property
    def storage_key(self) -> str:
        return TRAINING_DATA_KEYS[self.value]

    @property
    def display_name(self) -> str:
        return LANGUAGE_NAMES[self.value]

    def has_letter(self, letter: str) -> bool:
        return letter in ALPHABETS[self.value]

    @classmethod
    def default(cls) -> "SignLanguage":
        return cls(DEFAULT_LANGUAGE)


def parse_language(value: Union[str, SignLanguage]) -> SignLanguage:
    """
    Convert a user supplied value into a SignLanguage.

    Args:
        value: "ASL", "fsl", or an existing SignLanguage

    Returns:
        The matching SignLanguage

    Raises:
        ValueError: if the value names no supported language
    """
    if isinstance(value, SignLanguage):
        return value
    try:
        return SignLanguage(str(value).strip().upper())
    except ValueError:
        valid = ", ".join(lang.value for lang in SignLanguage)
        raise ValueError(f"Invalid language: {value}. Must be one of {valid}.") from None
