"""
Typed values passed between the indexing, draw and output stages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import pandas as pd

from divvy.errors import InvalidOutputShapeError


class OutputShape(str, Enum):
    """What each subsample returns."""
    LOCS = "locs"  # coordinates of the drawn sites, in draw order
    FULL = "full"  # every occurrence row at a drawn site, in row order

    @classmethod
    def parse(cls, value):
        """Coerce a string (or OutputShape) to OutputShape.

        Raises
        ------
        InvalidOutputShapeError
            For anything other than "locs" or "full".
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            options = ", ".join(repr(s.value) for s in cls)
            raise InvalidOutputShapeError(
                f"output argument must be one of ({options}), got {value!r}"
            ) from None


@dataclass
class Subsample:
    """Result of one draw: the seed, the drawn site ids, and formatted rows."""

    iteration: int
    seed: object
    site_ids: tuple
    data: Optional[pd.DataFrame] = field(default=None, repr=False)

    @property
    def n_sites(self):
        return len(self.site_ids)
