"""
Core entity classes (ADTs) for the analytics engine.

These classes represent the data structures passed between the merger,
the statistics and correlation functions, and the chart/report layers.
All of them are immutable once constructed.
"""

import math
import re
from dataclasses import dataclass, asdict
from typing import Dict, Iterator, List, Optional, Sequence, Tuple


_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

INSIGHT_TYPES = ("positive", "negative", "neutral")


@dataclass(frozen=True)
class DataPoint:
    """
    A single observation of one economic variable.

    Attributes:
        date: ISO date string "YYYY-MM-DD" (annual data uses "YYYY-01-01")
        value: Observed value

    Representation Invariants:
        - date matches YYYY-MM-DD
        - value is a float
    """
    date: str
    value: float

    def __post_init__(self):
        """Validate representation invariants."""
        if not isinstance(self.date, str) or not _ISO_DATE.match(self.date):
            raise ValueError(f"invalid date: {self.date!r} (expected YYYY-MM-DD)")
        object.__setattr__(self, "value", float(self.value))

    def as_dict(self) -> dict:
        return {"date": self.date, "value": self.value}


@dataclass(frozen=True)
class Statistics:
    """
    Descriptive statistics of one series.

    std is the population standard deviation (divisor N).
    """
    mean: float
    median: float
    std: float
    min: float
    max: float

    @property
    def coefficient_of_variation(self) -> float:
        """std / mean as a percentage; NaN when the mean is zero."""
        if self.mean == 0:
            return math.nan
        return self.std / self.mean * 100

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CorrelationMatrix:
    """
    Whole-history Pearson coefficients between the three dashboard variables.

    Each field lies in [-1, 1], or is NaN when a variable has zero variance.
    """
    cpi_usdinr: float
    cpi_nifty: float
    usdinr_nifty: float

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class HistogramBin:
    """
    One equal-width bucket shared by two comparison groups.

    Attributes:
        range_label: Human-readable bounds, e.g. "1.00-10.80"
        count_a: Number of group A values in this bucket
        count_b: Number of group B values in this bucket
        lower: Lower bound (inclusive)
        upper: Upper bound (exclusive, except for the last bucket)
    """
    range_label: str
    count_a: int
    count_b: int
    lower: float
    upper: float

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Insight:
    """
    An automatically generated observation about the merged data.

    Representation Invariants:
        - type is one of: "positive", "negative", "neutral"
        - title is non-empty
    """
    id: str
    type: str
    title: str
    description: str
    value: Optional[float] = None

    def __post_init__(self):
        """Validate representation invariants."""
        if self.type not in INSIGHT_TYPES:
            raise ValueError(f"invalid insight type: {self.type}")
        if not self.title:
            raise ValueError("title cannot be empty")

    def as_dict(self) -> dict:
        return asdict(self)


class MergedSeries:
    """
    Several variables merged into one record stream keyed by date.

    Each record is a dict with a "date" key plus one key per variable that
    has an observation on that date. A variable with no observation is
    absent from the record (never 0, never None).

    Representation Invariants:
        - every record has a "date" key
        - record dates are strictly ascending (sorted, no duplicates)
    """

    def __init__(self, records: Sequence[Dict[str, float]] = ()):
        """
        Initialize a MergedSeries.

        Preconditions:
            - records are already sorted by date

        Postconditions:
            - records are copied; later changes to the inputs have no effect

        Raises:
            ValueError: If a record lacks a date or dates are not strictly ascending
        """
        copies = []
        for record in records:
            if "date" not in record:
                raise ValueError("every record needs a 'date' key")
            copies.append(dict(record))
        self._records = tuple(copies)

        self._check_invariants()

    def _check_invariants(self):
        """Check representation invariants."""
        for prev, curr in zip(self._records, self._records[1:]):
            if not prev["date"] < curr["date"]:
                raise ValueError(
                    f"dates must be strictly ascending: {prev['date']} then {curr['date']}"
                )

    @property
    def dates(self) -> List[str]:
        """Return the record dates in order."""
        return [record["date"] for record in self._records]

    @property
    def variables(self) -> List[str]:
        """Return variable names in order of first appearance."""
        names = {}
        for record in self._records:
            for key in record:
                if key != "date":
                    names.setdefault(key, None)
        return list(names)

    def values(self, key: str) -> List[float]:
        """Return the defined values of one variable, skipping absent records."""
        return [record[key] for record in self._records if key in record]

    def column(self, key: str) -> List[Optional[float]]:
        """Return one entry per record: the value, or None where absent."""
        return [record.get(key) for record in self._records]

    def paired(self, x_key: str, y_key: str) -> Tuple[List[float], List[float]]:
        """
        Return two equal-length lists of values from records holding both variables.

        This is the filtering the correlation engine expects callers to do.
        """
        xs, ys = [], []
        for record in self._records:
            if x_key in record and y_key in record:
                xs.append(record[x_key])
                ys.append(record[y_key])
        return xs, ys

    def split(self) -> Dict[str, List[DataPoint]]:
        """Split back into one DataPoint list per variable."""
        series = {name: [] for name in self.variables}
        for record in self._records:
            for name, value in record.items():
                if name != "date":
                    series[name].append(DataPoint(record["date"], value))
        return series

    def to_records(self) -> List[dict]:
        """Return copies of all records."""
        return [dict(record) for record in self._records]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[dict]:
        for record in self._records:
            yield dict(record)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return MergedSeries(self._records[index])
        return dict(self._records[index])

    def __eq__(self, other) -> bool:
        if not isinstance(other, MergedSeries):
            return NotImplemented
        return self._records == other._records

    def __repr__(self) -> str:
        span = f" {self._records[0]['date']}..{self._records[-1]['date']}" if self._records else ""
        return f"MergedSeries({len(self)} records{span}, variables={self.variables})"
