from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
from loguru import logger

from text_mining.application.settings import Settings
from text_mining.application.services.term_stats import CountItem, TermCount, TermStats, TermStatsAggregator
from text_mining.application.services.term_counter import TermCounter
from text_mining.application.services.ranking import RankedTerm, TfIdfRanker
from text_mining.application.services.zipf import ZipfAnalyzer, ZipfFit, ZipfRow


@dataclass
class AnalysisService:
    settings: Settings
    aggregator: TermStatsAggregator
    counter: TermCounter
    ranker: TfIdfRanker
    zipf_analyzer: ZipfAnalyzer

    @classmethod
    def build(cls, settings: Settings) -> "AnalysisService":
        aggregator = TermStatsAggregator()
        logger.info(
            "Building analysis service (top_n={}, with_ties={}, zipf ranks {}..{})",
            settings.default_top_n,
            settings.top_with_ties,
            settings.zipf_min_rank,
            settings.zipf_max_rank,
        )
        return cls(settings=settings,
                   aggregator=aggregator,
                   counter=TermCounter(lowercase=settings.lowercase_terms),
                   ranker=TfIdfRanker(),
                   zipf_analyzer=ZipfAnalyzer(aggregator=aggregator))

    def count(self, documents: Mapping[str, Iterable[str]]) -> List[TermCount]:
        rows = self.counter.count_documents(documents)
        logger.info("Counted {} (document, term) row(s) across {} document(s)", len(rows), len(documents))
        return rows

    def tf_idf(self, counts: Iterable[CountItem]) -> List[TermStats]:
        stats = self.aggregator.compute(counts)
        logger.info("Computed tf-idf for {} row(s)", len(stats))
        return stats

    def top_terms(
        self,
        counts: Iterable[CountItem],
        n: Optional[int] = None,
        with_ties: Optional[bool] = None,
    ) -> Dict[str, List[RankedTerm]]:
        n = self.settings.default_top_n if n is None else n
        with_ties = self.settings.top_with_ties if with_ties is None else with_ties

        stats = self.tf_idf(counts)
        top = self.ranker.top_terms(stats, n=n, with_ties=with_ties)
        logger.info("Selected top {} term(s) for {} document(s)", n, len(top))
        return top

    def zipf(
        self,
        counts: Iterable[CountItem],
        min_rank: Optional[int] = None,
        max_rank: Optional[int] = None,
    ) -> Tuple[List[ZipfRow], ZipfFit]:
        min_rank = self.settings.zipf_min_rank if min_rank is None else min_rank
        max_rank = self.settings.zipf_max_rank if max_rank is None else max_rank

        rows = self.zipf_analyzer.rank_frequencies(counts)
        fit = self.zipf_analyzer.fit(rows, min_rank=min_rank, max_rank=max_rank)
        logger.info("Zipf fit slope={:.4f} over {} point(s)", fit.slope, fit.n_points)
        return rows, fit
