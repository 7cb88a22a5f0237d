import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Iterator, Tuple

DEFAULT_START = dt.date(2017, 1, 1)
DEFAULT_END = dt.date(2017, 6, 20)

_CENT = Decimal("0.01")


class Interval(str, Enum):
    DAY = "1d"
    WEEK = "1wk"
    MONTH = "1mo"

    @classmethod
    def parse(cls, value: str) -> "Interval":
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(i.value for i in cls)
            raise ValueError(f"unsupported interval {value!r} (expected one of {choices})") from None


def round_price(value) -> float:
    """Round a price to 2 decimal places, halves away from zero."""
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class ChartRequest:
    symbol: str
    start: dt.date = DEFAULT_START
    end: dt.date = DEFAULT_END
    interval: Interval = Interval.DAY

    def __post_init__(self):
        if not self.symbol or not self.symbol.strip():
            raise ValueError("symbol must be provided")
        object.__setattr__(self, "symbol", self.symbol.strip())
        object.__setattr__(self, "interval", Interval(self.interval))


@dataclass(frozen=True)
class ChartPoint:
    date: dt.date
    close: float

    @property
    def label(self) -> str:
        # month/day/year, no zero padding (1/3/2017)
        return f"{self.date.month}/{self.date.day}/{self.date.year}"


@dataclass(frozen=True)
class ChartSeries:
    """Ordered chart points, in the order the provider returned the bars."""

    points: Tuple[ChartPoint, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(self.points))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[ChartPoint]:
        return iter(self.points)

    @property
    def closes(self) -> Tuple[float, ...]:
        return tuple(p.close for p in self.points)

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(p.label for p in self.points)

    @property
    def first_label(self) -> str:
        return self.points[0].label

    @property
    def last_label(self) -> str:
        return self.points[-1].label
