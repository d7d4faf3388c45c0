from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List

from text_mining.application.services.term_stats import InvalidInputError, TermStats


@dataclass(frozen=True)
class RankedTerm:
    rank: int  # 1-based position in its ranking
    stats: TermStats

    def as_dict(self) -> dict:
        return {"rank": self.rank, **self.stats.as_dict()}


def _ranking_key(s: TermStats):
    # tf-idf descending; equal scores (e.g. every ln(6/1) term) ordered by document, then term
    return (-s.tf_idf, s.document, s.term)


@dataclass
class TfIdfRanker:
    """Orders term statistics by tf-idf with an explicit tie-break."""

    def rank(self, stats: Iterable[TermStats]) -> List[RankedTerm]:
        ordered = sorted(stats, key=_ranking_key)
        return [RankedTerm(rank=i, stats=s) for i, s in enumerate(ordered, start=1)]

    def highest(self, stats: Iterable[TermStats], n: int) -> List[RankedTerm]:
        if n < 1:
            raise InvalidInputError(f"n must be >= 1, got {n}")
        return self.rank(stats)[:n]

    def top_terms(
        self,
        stats: Iterable[TermStats],
        n: int,
        with_ties: bool = False,
    ) -> Dict[str, List[RankedTerm]]:
        """
        The n highest tf-idf terms of each document, ranks restarting at 1.

        with_ties=True also keeps rows whose score equals the n-th one, so a
        document can return more than n terms.
        """
        if n < 1:
            raise InvalidInputError(f"n must be >= 1, got {n}")

        by_doc: Dict[str, List[TermStats]] = {}
        for s in sorted(stats, key=_ranking_key):
            by_doc.setdefault(s.document, []).append(s)

        top: Dict[str, List[RankedTerm]] = {}
        for document in sorted(by_doc):
            rows = by_doc[document]
            keep = rows[:n]
            if with_ties and len(rows) > n:
                cutoff = keep[-1].tf_idf
                for s in rows[n:]:
                    if s.tf_idf != cutoff:
                        break
                    keep.append(s)
            top[document] = [RankedTerm(rank=i, stats=s) for i, s in enumerate(keep, start=1)]
        return top
