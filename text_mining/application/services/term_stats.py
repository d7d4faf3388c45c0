from __future__ import annotations
from dataclasses import dataclass
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Tuple, Union
import math

from loguru import logger


class InvalidInputError(ValueError):
    """Count table (or a parameter over it) that the term statistics can't be built from."""


@dataclass(frozen=True)
class TermCount:
    """How many times `term` occurs in `document`."""
    document: str
    term: str
    count: int


@dataclass(frozen=True)
class TermStats:
    document: str
    term: str
    count: int
    term_frequency: float
    inverse_document_frequency: float
    tf_idf: float

    def as_dict(self) -> dict:
        return {
            "document": self.document,
            "term": self.term,
            "count": self.count,
            "term_frequency": self.term_frequency,
            "inverse_document_frequency": self.inverse_document_frequency,
            "tf_idf": self.tf_idf,
        }


CountTuple = Tuple[str, str, int]            # (document, term, count)
CountDict = Mapping[str, Any]                # {"document": ..., "term": ..., "count": ...}
CountItem = Union[TermCount, CountTuple, CountDict]


def to_term_count(item: CountItem) -> TermCount:
    """
    Accepts either:
    - TermCount(document, term, count)
    - (document, term, count)
    - {"document": ..., "term": ..., "count": ...}

    and checks the fields a count row must have. Document ids and terms
    are stripped of surrounding whitespace.
    """
    # --- normalize input ---
    if isinstance(item, TermCount):
        document, term, count = item.document, item.term, item.count
    elif isinstance(item, tuple):
        if len(item) != 3:
            raise InvalidInputError(f"Expected (document, term, count), got {item!r}")
        document, term, count = item
    elif isinstance(item, Mapping):
        try:
            document, term, count = item["document"], item["term"], item["count"]
        except KeyError as e:
            raise InvalidInputError(f"Count row is missing field {e}") from e
    else:
        raise InvalidInputError(f"Unsupported count item type: {type(item)}")

    # --- validate ---
    if not isinstance(document, str) or not document.strip():
        raise InvalidInputError(f"Document id must be a non-empty string, got {document!r}")
    if not isinstance(term, str) or not term.strip():
        raise InvalidInputError(f"Term must be a non-empty string, got {term!r}")
    # bool is an int subclass; True is not a count
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidInputError(f"Count for ({document!r}, {term!r}) must be an integer, got {count!r}")
    if count < 1:
        raise InvalidInputError(f"Count for ({document!r}, {term!r}) must be >= 1, got {count}")

    # surrounding whitespace is not part of a key: "A " and "A" are one document
    return TermCount(document=document.strip(), term=term.strip(), count=count)


@dataclass
class TermStatsAggregator:
    """
    Term frequency, inverse document frequency and tf-idf over a
    (document, term, count) table.

    Two lookups are built first (document -> total count, term -> number of
    documents containing it), then every row is derived from its own count
    and those two scalars. Rows come back in input order.
    """

    def validate(self, counts: Iterable[CountItem]) -> List[TermCount]:
        rows = [to_term_count(it) for it in counts]
        if not rows:
            raise InvalidInputError("Count table is empty")

        seen: set[tuple[str, str]] = set()
        for row in rows:
            key = (row.document, row.term)
            if key in seen:
                raise InvalidInputError(
                    f"Duplicate (document, term) key {key!r}; merge counts before computing"
                )
            seen.add(key)
        return rows

    def document_totals(self, counts: Iterable[CountItem]) -> Dict[str, int]:
        totals: Dict[str, int] = {}
        for row in self.validate(counts):
            totals[row.document] = totals.get(row.document, 0) + row.count
        return totals

    def document_frequencies(self, counts: Iterable[CountItem]) -> Dict[str, int]:
        # keys are unique, so each row is one document containing the term
        doc_freq: Dict[str, int] = {}
        for row in self.validate(counts):
            doc_freq[row.term] = doc_freq.get(row.term, 0) + 1
        return doc_freq

    def compute(self, counts: Iterable[CountItem]) -> List[TermStats]:
        rows = self.validate(counts)

        totals: Dict[str, int] = {}
        doc_freq: Dict[str, int] = {}
        for row in rows:
            totals[row.document] = totals.get(row.document, 0) + row.count
            doc_freq[row.term] = doc_freq.get(row.term, 0) + 1

        n_documents = len(totals)
        logger.debug(
            "Computing tf-idf for {} row(s): {} document(s), {} distinct term(s)",
            len(rows),
            n_documents,
            len(doc_freq),
        )

        # idf depends only on the term; log(1) == 0.0 exactly for ubiquitous terms
        idf = {term: math.log(n_documents / df) for term, df in doc_freq.items()}

        stats: List[TermStats] = []
        for row in rows:
            tf = row.count / totals[row.document]
            term_idf = idf[row.term]
            stats.append(
                TermStats(
                    document=row.document,
                    term=row.term,
                    count=row.count,
                    term_frequency=tf,
                    inverse_document_frequency=term_idf,
                    tf_idf=tf * term_idf,
                )
            )
        return stats
