import math

import pytest

from text_mining.application.services.term_stats import (
    InvalidInputError,
    TermCount,
    TermStats,
    TermStatsAggregator,
    to_term_count,
)


def _by_key(stats):
    return {(s.document, s.term): s for s in stats}


def test_two_document_example_matches_hand_computation():
    counts = [("A", "the", 10), ("A", "whale", 2), ("B", "the", 8)]
    stats = _by_key(TermStatsAggregator().compute(counts))

    assert stats[("A", "the")].inverse_document_frequency == 0.0
    assert stats[("A", "the")].tf_idf == 0.0
    assert stats[("B", "the")].tf_idf == 0.0

    whale = stats[("A", "whale")]
    assert whale.inverse_document_frequency == pytest.approx(math.log(2))
    assert whale.term_frequency == pytest.approx(2 / 12)
    assert whale.tf_idf == pytest.approx(0.1155, abs=1e-4)


def test_output_preserves_input_fields_and_order():
    counts = [
        TermCount("B", "the", 8),
        TermCount("A", "whale", 2),
        TermCount("A", "the", 10),
    ]
    stats = TermStatsAggregator().compute(counts)

    assert [(s.document, s.term, s.count) for s in stats] == [
        ("B", "the", 8),
        ("A", "whale", 2),
        ("A", "the", 10),
    ]
    assert all(isinstance(s, TermStats) for s in stats)


def test_accepts_mappings():
    stats = TermStatsAggregator().compute(
        [{"document": "A", "term": "x", "count": 1}, {"document": "B", "term": "y", "count": 3}]
    )
    assert len(stats) == 2
    assert stats[1].term_frequency == 1.0


def test_tf_idf_is_product_of_tf_and_idf():
    counts = [
        ("Emma", "emma", 786), ("Emma", "miss", 599), ("Emma", "harriet", 506),
        ("Persuasion", "anne", 447), ("Persuasion", "miss", 120),
        ("Sense", "elinor", 623), ("Sense", "miss", 210), ("Sense", "harriet", 2),
    ]
    for s in TermStatsAggregator().compute(counts):
        assert s.tf_idf == pytest.approx(s.term_frequency * s.inverse_document_frequency)


def test_term_frequencies_sum_to_one_per_document():
    counts = [
        ("A", "a", 3), ("A", "b", 5), ("A", "c", 7),
        ("B", "a", 1), ("B", "d", 1),
        ("C", "e", 13),
    ]
    sums = {}
    for s in TermStatsAggregator().compute(counts):
        sums[s.document] = sums.get(s.document, 0.0) + s.term_frequency

    assert sums == pytest.approx({"A": 1.0, "B": 1.0, "C": 1.0})


def test_idf_non_negative_and_strictly_decreasing_with_document_frequency():
    # "rare" in 1 document, "mid" in 2, "common" in 3, "all" in 4
    counts = [
        ("d1", "rare", 1), ("d1", "mid", 1), ("d1", "common", 1), ("d1", "all", 1),
        ("d2", "mid", 1), ("d2", "common", 1), ("d2", "all", 1),
        ("d3", "common", 1), ("d3", "all", 1),
        ("d4", "all", 1),
    ]
    idf = {s.term: s.inverse_document_frequency for s in TermStatsAggregator().compute(counts)}

    assert all(v >= 0.0 for v in idf.values())
    assert idf["rare"] > idf["mid"] > idf["common"] > idf["all"] == 0.0
    assert idf["rare"] == pytest.approx(math.log(4))


def test_ubiquitous_term_scores_zero_regardless_of_frequency():
    counts = [("A", "the", 1000), ("A", "x", 1), ("B", "the", 1), ("B", "y", 50)]
    for s in TermStatsAggregator().compute(counts):
        if s.term == "the":
            assert s.inverse_document_frequency == 0.0
            assert s.tf_idf == 0.0


def test_single_document_corpus_is_all_zero():
    counts = [("only", "a", 4), ("only", "b", 2), ("only", "c", 1)]
    stats = TermStatsAggregator().compute(counts)

    assert [s.inverse_document_frequency for s in stats] == [0.0, 0.0, 0.0]
    assert [s.tf_idf for s in stats] == [0.0, 0.0, 0.0]


def test_compute_is_idempotent():
    counts = [("A", "the", 10), ("A", "whale", 2), ("B", "the", 8), ("B", "ship", 3)]
    agg = TermStatsAggregator()
    assert agg.compute(counts) == agg.compute(counts)


def test_stats_are_immutable():
    stats = TermStatsAggregator().compute([("A", "x", 1)])
    with pytest.raises(AttributeError):
        stats[0].tf_idf = 1.0


def test_document_totals_and_frequencies():
    counts = [("A", "the", 10), ("A", "whale", 2), ("B", "the", 8)]
    agg = TermStatsAggregator()

    assert agg.document_totals(counts) == {"A": 12, "B": 8}
    assert agg.document_frequencies(counts) == {"the": 2, "whale": 1}


def test_duplicate_keys_raise():
    with pytest.raises(InvalidInputError, match="Duplicate"):
        TermStatsAggregator().compute([("A", "x", 1), ("A", "x", 2)])


def test_zero_count_raises():
    with pytest.raises(InvalidInputError):
        TermStatsAggregator().compute([("A", "x", 0), ("A", "y", 2)])


def test_negative_count_raises():
    with pytest.raises(InvalidInputError):
        TermStatsAggregator().compute([("A", "x", -3)])


def test_empty_input_raises():
    with pytest.raises(InvalidInputError, match="empty"):
        TermStatsAggregator().compute([])


@pytest.mark.parametrize(
    "item",
    [
        ("A", "x", 1.5),
        ("A", "x", True),
        ("A", "x", "3"),
        ("", "x", 1),
        ("A", "   ", 1),
        ("A", "x"),
        {"document": "A", "term": "x"},
        ["A", "x", 1],
    ],
)
def test_malformed_rows_raise(item):
    with pytest.raises(InvalidInputError):
        to_term_count(item)


def test_invalid_input_error_is_a_value_error():
    assert issubclass(InvalidInputError, ValueError)


def test_whitespace_around_keys_is_stripped():
    agg = TermStatsAggregator()

    assert agg.document_totals([("A", "x", 1), ("A ", "y", 2)]) == {"A": 3}
    with pytest.raises(InvalidInputError, match="Duplicate"):
        agg.compute([("A", "x", 1), ("A", " x ", 1)])
    assert to_term_count((" A", "x ", 1)) == TermCount("A", "x", 1)
