import copy

import pytest

from castro311.analytics import CategoryCount, Stats, compute_stats, rank_open_types, summarize


@pytest.fixture
def sample_collection(make_feature, make_collection):
    """A=3, B=5, C=3 open cases, first seen in order A, B, C, plus closed noise."""
    order = ["A", "B", "C", "B", "A", "B", "C", "A", "B", "C", "B"]
    features = [make_feature(case_id=i, request_type=t) for i, t in enumerate(order)]
    features += [
        make_feature(case_id=100, status="Closed", request_type="C"),
        make_feature(case_id=101, status="Closed", request_type="D"),
    ]
    return make_collection(features)


class TestSummarize:
    """Tests for stats and request-type rankings."""

    def test_stats(self, sample_collection):
        stats, _ = summarize(sample_collection)
        assert stats == Stats(total=13, open=11, closed=2)

    def test_ranking_is_descending_with_stable_ties(self, sample_collection):
        """Equal counts keep first-seen order, not alphabetical order."""
        _, ranked = summarize(sample_collection)
        assert ranked == [
            CategoryCount("B", 5),
            CategoryCount("A", 3),
            CategoryCount("C", 3),
        ]

    def test_ties_follow_first_seen_not_alphabetical(self, make_feature, make_collection):
        features = [make_feature(request_type=t) for t in ["Zebra", "Apple", "Mango"]]
        ranked = rank_open_types(make_collection(features)["features"])
        assert [c.request_type for c in ranked] == ["Zebra", "Apple", "Mango"]

    def test_counts_sum_to_open(self, sample_collection):
        stats, ranked = summarize(sample_collection)
        assert sum(c.count for c in ranked) == stats.open
        assert stats.open + stats.closed <= stats.total

    def test_no_closed_records(self, make_feature, make_collection):
        stats, _ = summarize(make_collection([make_feature(case_id=i) for i in range(4)]))
        assert stats.closed == 0
        assert stats.open == 4

    def test_other_statuses_count_toward_total_only(self, make_feature, make_collection):
        features = [
            make_feature(status="Open"),
            make_feature(status="Pending"),
            make_feature(status=None),
        ]
        stats, ranked = summarize(make_collection(features))
        assert stats == Stats(total=3, open=1, closed=0)
        assert ranked == [CategoryCount("Graffiti", 1)]

    def test_tolerates_malformed_features(self, make_feature):
        features = [
            {"type": "Feature", "geometry": None},
            {"type": "Feature", "properties": None},
            make_feature(request_type=None),
            make_feature(),
        ]
        stats = compute_stats(features)
        ranked = rank_open_types(features)
        assert stats == Stats(total=4, open=2, closed=0)
        assert ranked == [CategoryCount(None, 1), CategoryCount("Graffiti", 1)]

    def test_non_string_request_types_are_uncategorized(self, make_feature, make_collection):
        features = [
            make_feature(),
            make_feature(request_type=["Graffiti"]),
            make_feature(request_type={"name": "Noise"}),
        ]
        stats, ranked = summarize(make_collection(features))
        assert stats == Stats(total=3, open=3, closed=0)
        assert ranked == [CategoryCount(None, 2), CategoryCount("Graffiti", 1)]

    def test_empty_collection(self, make_collection):
        stats, ranked = summarize(make_collection([]))
        assert stats == Stats()
        assert ranked == []

    def test_does_not_mutate_input(self, sample_collection):
        before = copy.deepcopy(sample_collection)
        summarize(sample_collection)
        assert sample_collection == before
