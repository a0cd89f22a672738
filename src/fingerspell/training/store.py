"""
Language-scoped reference store for captured training samples.
"""
import logging
from typing import List, Optional, Sequence, Union

import numpy as np
from pydantic import ValidationError

from src.fingerspell.core.config import ACTIVE_LANGUAGE_KEY
from src.fingerspell.core.errors import InvalidImportError, StorageWriteError
from src.fingerspell.core.languages import SignLanguage, parse_language
from src.fingerspell.training.defaults import get_default_alphabet
from src.fingerspell.training.schemas import ReferenceEntry, dump_entries, parse_entries
from src.fingerspell.training.storage import KeyValueStorage

logger = logging.getLogger(__name__)

LanguageArg = Optional[Union[str, SignLanguage]]


class ReferenceStore:
    """
    Reads and writes reference entries per sign language.

    Every operation takes an optional language; when omitted the store's
    active language is used. The active language itself is persisted under its
    own key so it survives across sessions.

    Concurrent writers are not coordinated: a save reads the whole set, edits
    it and writes it back, so the last writer wins.
    """

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    # Active language

    @property
    def active_language(self) -> SignLanguage:
        value = self.storage.get_item(ACTIVE_LANGUAGE_KEY)
        if value:
            try:
                return parse_language(value)
            except ValueError:
                logger.warning("Ignoring unknown stored language %r", value)
        return SignLanguage.default()

    @active_language.setter
    def active_language(self, language: Union[str, SignLanguage]):
        language = parse_language(language)
        self.storage.set_item(ACTIVE_LANGUAGE_KEY, language.value)
        logger.info("Active sign language set to %s", language.value)

    def _resolve(self, language: LanguageArg) -> SignLanguage:
        if language is None:
            return self.active_language
        return parse_language(language)

    # Reads

    def load(self, language: LanguageArg = None) -> List[ReferenceEntry]:
        """
        Get the persisted entries for a language.

        Returns:
            List of entries, empty if nothing was saved or the stored payload
            is corrupt
        """
        language = self._resolve(language)
        payload = self.storage.get_item(language.storage_key)
        if not payload:
            return []
        try:
            return parse_entries(payload)
        except ValidationError as e:
            logger.warning("Discarding unreadable %s training data: %s",
                           language.value, e.errors()[0].get("msg", e))
            return []

    def has_training_data(self, language: LanguageArg = None) -> bool:
        return len(self.load(language)) > 0

    def get_default(self, language: LanguageArg = None,
                    rng: Optional[np.random.Generator] = None) -> List[ReferenceEntry]:
        """Built-in synthetic alphabet for a language. Random unless rng is seeded."""
        return get_default_alphabet(self._resolve(language), rng=rng)

    def get_combined(self, language: LanguageArg = None,
                     defaults: Optional[Sequence[ReferenceEntry]] = None) -> List[ReferenceEntry]:
        """
        User entries plus default entries for letters the user has not trained.

        Args:
            language: Sign language, active language if omitted
            defaults: Precomputed default set to reuse; generated if omitted

        Returns:
            Entry list with at most one entry per letter, user entries first
        """
        language = self._resolve(language)
        user_entries = self.load(language)
        if defaults is None:
            defaults = self.get_default(language)

        seen = set()
        combined = []
        for entry in user_entries:
            if entry.letter not in seen:
                seen.add(entry.letter)
                combined.append(entry)
        for entry in defaults:
            if entry.letter not in seen:
                seen.add(entry.letter)
                combined.append(entry)
        return combined

    # Writes

    def save(self, letter: str, samples: Sequence[Sequence[float]],
             language: LanguageArg = None) -> ReferenceEntry:
        """
        Replace (or add) the entry for a letter.

        Raises:
            StorageWriteError: if the storage rejected the write
        """
        language = self._resolve(language)
        entry = ReferenceEntry.create(letter, samples)

        entries = self.load(language)
        for i, existing in enumerate(entries):
            if existing.letter == letter:
                entries[i] = entry
                break
        else:
            entries.append(entry)

        self._write(language, entries)
        logger.info("Saved %d samples for %s letter '%s'", len(entry.samples), language.value, letter)
        return entry

    def clear(self, language: LanguageArg = None):
        """Remove every saved entry for a language. Cannot be undone."""
        language = self._resolve(language)
        self.storage.remove_item(language.storage_key)
        logger.info("Cleared %s training data", language.value)

    def _write(self, language: SignLanguage, entries: Sequence[ReferenceEntry]):
        try:
            self.storage.set_item(language.storage_key, dump_entries(entries))
        except StorageWriteError:
            raise
        except OSError as e:
            raise StorageWriteError(f"Could not save {language.value} training data: {e}") from e

    # Import / export

    def export_json(self, language: LanguageArg = None) -> str:
        """Serialize a language's saved entries as a JSON document."""
        return dump_entries(self.load(language))

    def import_json(self, payload: Union[str, bytes], language: LanguageArg = None) -> List[ReferenceEntry]:
        """
        Replace a language's saved entries with an imported JSON document.

        Raises:
            InvalidImportError: if the payload is not a list of entries; the
                stored data is left untouched
            StorageWriteError: if the storage rejected the write
        """
        language = self._resolve(language)
        try:
            entries = parse_entries(payload)
        except ValidationError as e:
            raise InvalidImportError(f"Invalid training data file: {e.errors()[0].get('msg', e)}") from e

        letters = [entry.letter for entry in entries]
        if len(set(letters)) != len(letters):
            raise InvalidImportError("Invalid training data file: duplicate letters")

        self._write(language, entries)
        logger.info("Imported %d %s entries", len(entries), language.value)
        return entries

    # Training API aliases

    def save_training_data(self, letter, samples, language: LanguageArg = None):
        return self.save(letter, samples, language)

    def get_training_data(self, language: LanguageArg = None):
        return self.load(language)

    def clear_training_data(self, language: LanguageArg = None):
        self.clear(language)
