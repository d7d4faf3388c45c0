from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np
from loguru import logger

from text_mining.application.services.term_stats import (
    CountItem,
    InvalidInputError,
    TermStatsAggregator,
)


@dataclass(frozen=True)
class ZipfRow:
    document: str
    term: str
    count: int
    total: int
    rank: int
    term_frequency: float

    def as_dict(self) -> dict:
        return {
            "document": self.document,
            "term": self.term,
            "count": self.count,
            "total": self.total,
            "rank": self.rank,
            "term_frequency": self.term_frequency,
        }


@dataclass(frozen=True)
class ZipfFit:
    """
    log10(term_frequency) = intercept + slope * log10(rank)

    When every point in the window has the same term frequency the line is
    flat and fits exactly; r_squared is reported as 1.0 there (it is
    undefined, and NaN can't be sent as JSON).
    """
    slope: float
    intercept: float
    r_squared: float
    n_points: int
    min_rank: Optional[int]
    max_rank: Optional[int]

    def as_dict(self) -> dict:
        return {
            "slope": self.slope,
            "intercept": self.intercept,
            "r_squared": self.r_squared,
            "n_points": self.n_points,
            "min_rank": self.min_rank,
            "max_rank": self.max_rank,
        }


@dataclass
class ZipfAnalyzer:
    """
    Zipf's law: the frequency a word appears is inversely proportional to its rank.

    rank_frequencies() ranks every term inside its own document by count;
    fit() estimates the exponent on a log-log scale (an exact Zipf
    distribution has slope -1).
    """
    aggregator: TermStatsAggregator = field(default_factory=TermStatsAggregator)

    def rank_frequencies(self, counts: Iterable[CountItem]) -> List[ZipfRow]:
        rows = self.aggregator.validate(counts)

        by_doc: Dict[str, list] = {}
        for row in rows:
            by_doc.setdefault(row.document, []).append(row)

        out: List[ZipfRow] = []
        for document, doc_rows in by_doc.items():
            total = sum(r.count for r in doc_rows)
            doc_rows.sort(key=lambda r: (-r.count, r.term))
            for rank, r in enumerate(doc_rows, start=1):
                out.append(
                    ZipfRow(
                        document=document,
                        term=r.term,
                        count=r.count,
                        total=total,
                        rank=rank,
                        term_frequency=r.count / total,
                    )
                )
        return out

    def fit(
        self,
        rows: Iterable[ZipfRow],
        min_rank: Optional[int] = None,
        max_rank: Optional[int] = None,
    ) -> ZipfFit:
        if min_rank is not None and min_rank < 1:
            raise InvalidInputError(f"min_rank must be >= 1, got {min_rank}")
        if min_rank is not None and max_rank is not None and max_rank < min_rank:
            raise InvalidInputError(f"max_rank ({max_rank}) is below min_rank ({min_rank})")

        window = [
            r for r in rows
            if (min_rank is None or r.rank >= min_rank)
            and (max_rank is None or r.rank <= max_rank)
        ]
        if len(window) < 2 or len({r.rank for r in window}) < 2:
            raise InvalidInputError(
                f"Need at least two distinct ranks inside [{min_rank}, {max_rank}] to fit, got {len(window)} row(s)"
            )

        x = np.log10(np.array([r.rank for r in window], dtype=np.float64))
        y = np.log10(np.array([r.term_frequency for r in window], dtype=np.float64))

        slope, intercept = np.polyfit(x, y, 1)

        # R² (coefficient of determination)
        residuals = y - (slope * x + intercept)
        ss_res = float(np.sum(residuals ** 2))
        ss_tot = float(np.sum((y - y.mean()) ** 2))
        # flat window: see ZipfFit
        flat = bool(np.all(y == y[0]))
        r_squared = 1.0 if flat or ss_tot == 0.0 else 1.0 - ss_res / ss_tot

        logger.debug("Zipf fit over {} point(s): slope={:.4f} intercept={:.4f}", len(window), slope, intercept)
        return ZipfFit(
            slope=float(slope),
            intercept=float(intercept),
            r_squared=r_squared,
            n_points=len(window),
            min_rank=min_rank,
            max_rank=max_rank,
        )
