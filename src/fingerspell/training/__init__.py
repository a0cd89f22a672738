"""
Reference data for recognition: storage backends, the language-scoped
reference store and the built-in default alphabets.
"""
from src.fingerspell.training.storage import KeyValueStorage, MemoryStorage, FileStorage
from src.fingerspell.training.schemas import ReferenceEntry, dump_entries, parse_entries
from src.fingerspell.training.defaults import get_default_alphabet, generate_default_samples
from src.fingerspell.training.store import ReferenceStore

__all__ = [
    'KeyValueStorage',
    'MemoryStorage',
    'FileStorage',
    'ReferenceEntry',
    'dump_entries',
    'parse_entries',
    'get_default_alphabet',
    'generate_default_samples',
    'ReferenceStore',
]
