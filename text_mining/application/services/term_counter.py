# Tally already-tokenized terms into (document, term, count) rows
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Tuple

from loguru import logger

from text_mining.application.services.term_stats import (
    CountItem,
    InvalidInputError,
    TermCount,
    to_term_count,
)


@dataclass
class TermCounter:
    lowercase: bool = True

    def _term(self, term: str) -> str:
        if not isinstance(term, str) or not term.strip():
            raise InvalidInputError(f"Term must be a non-empty string, got {term!r}")
        term = term.strip()
        return term.lower() if self.lowercase else term

    def count_pairs(self, pairs: Iterable[Tuple[str, str]]) -> List[TermCount]:
        # counters = {"Emma": Counter({"emma": 786, "miss": 599, ...}), ...}
        counters: Dict[str, Counter] = {}
        for document, term in pairs:
            if not isinstance(document, str) or not document.strip():
                raise InvalidInputError(f"Document id must be a non-empty string, got {document!r}")
            counters.setdefault(document.strip(), Counter())[self._term(term)] += 1
        return self._to_rows(counters)

    def count_documents(self, documents: Mapping[str, Iterable[str]]) -> List[TermCount]:
        for document, terms in documents.items():
            # a raw string would be counted letter by letter
            if isinstance(terms, str):
                raise InvalidInputError(
                    f"Terms for document {document!r} must be a sequence of tokens, not a string"
                )
        return self.count_pairs(
            (document, term) for document, terms in documents.items() for term in terms
        )

    def merge(self, counts: Iterable[CountItem]) -> List[TermCount]:
        """Sum rows sharing a (document, term) key. Terms are only stripped, never case-folded."""
        counters: Dict[str, Counter] = {}
        n_in = 0
        for it in counts:
            row = to_term_count(it)
            counters.setdefault(row.document, Counter())[row.term] += row.count
            n_in += 1

        rows = self._to_rows(counters)
        if len(rows) < n_in:
            logger.debug("Merged {} count row(s) into {}", n_in, len(rows))
        return rows

    @staticmethod
    def _to_rows(counters: Dict[str, Counter]) -> List[TermCount]:
        rows: List[TermCount] = []
        # documents in first-seen order, most frequent terms first
        for document, counter in counters.items():
            for term, n in sorted(counter.items(), key=lambda x: (-x[1], x[0])):
                rows.append(TermCount(document=document, term=term, count=n))
        return rows
