"""
Pydantic schemas for persisted and exported reference data.
"""
import time
from typing import List, Sequence

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


def now_ms() -> int:
    """Current wall-clock time in milliseconds."""
    return int(time.time() * 1000)


class ReferenceEntry(BaseModel):
    """Captured samples for one letter of one sign language."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    letter: str = Field(min_length=1)
    samples: List[List[float]]
    captured_at: int = Field(alias="timestamp")

    @classmethod
    def create(cls, letter: str, samples: Sequence[Sequence[float]]) -> "ReferenceEntry":
        return cls(
            letter=letter,
            samples=[list(sample) for sample in samples],
            captured_at=now_ms(),
        )


# Wire format of a whole reference set: a JSON array of entries
ReferenceSet = TypeAdapter(List[ReferenceEntry])


def dump_entries(entries: Sequence[ReferenceEntry]) -> str:
    """Serialize entries to the JSON document used for storage and export."""
    return ReferenceSet.dump_json(list(entries), by_alias=True).decode("utf-8")


def parse_entries(payload) -> List[ReferenceEntry]:
    """
    Parse a JSON document into reference entries.

    Raises:
        pydantic.ValidationError: if the payload is not a JSON list of entries
    """
    return ReferenceSet.validate_json(payload)
