"""
Edition numbering — every visitor gets one of a hundred editions,
fixed for as long as their visitor token survives.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from config import settings
from generator.seeding import string_hash
from persistence import VISITOR_TOKEN_KEY, Persistence, get_or_create


@dataclass(frozen=True)
class Edition:
    number: int
    cap: int

    @property
    def filename_part(self) -> str:
        return f"{self.number:03d}"

    @property
    def label(self) -> str:
        return f"Edition {self.filename_part} of {self.cap}"


@lru_cache(maxsize=256)
def allocate_edition(visitor_token: str, master_seed: str, cap: int = 100) -> Edition:
    """hash(token + master seed) mod cap, shifted to start at 1."""
    return Edition(number=string_hash(visitor_token + master_seed) % cap + 1, cap=cap)


def new_visitor_token() -> str:
    return str(uuid.uuid4())


class EditionAllocator:
    """Resolves the visitor token from persistence and derives the edition."""

    def __init__(
        self,
        persistence: Persistence,
        master_seed: Optional[str] = None,
        cap: Optional[int] = None,
    ):
        self.master_seed = master_seed or settings.MASTER_SEED
        self.cap = cap or settings.EDITION_CAP
        self.visitor_token = get_or_create(persistence, VISITOR_TOKEN_KEY, new_visitor_token)
        self.edition = allocate_edition(self.visitor_token, self.master_seed, self.cap)

    @property
    def number(self) -> int:
        return self.edition.number

    @property
    def label(self) -> str:
        return self.edition.label
