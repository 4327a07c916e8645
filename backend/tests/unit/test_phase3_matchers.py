# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 3 — Feature matcher tests.
All tests use synthetic shapely geometries and call-counting stub matchers.
Tests cover: leaf scorers, weighted aggregation, and centroid alignment.
"""

import pytest
from shapely.affinity import translate
from shapely.geometry import LineString, Point, Polygon, box

from geoconflate.models.collection import FeatureCollection
from geoconflate.models.feature import AttributeType, Feature, FeatureSchema
from geoconflate.models.matches import Matches
from geoconflate.modules.matching.base import FeatureMatcher


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _schema() -> FeatureSchema:
    schema = FeatureSchema.with_geometry()
    schema.add_attribute("name", AttributeType.STRING)
    return schema


SCHEMA = _schema()


def _feature(feature_id, geometry, **attributes) -> Feature:
    return Feature(
        feature_id=feature_id,
        geometry=geometry,
        feature_schema=SCHEMA,
        attributes=attributes,
    )


def _candidates(*features) -> FeatureCollection:
    return FeatureCollection(SCHEMA, features)


class _StubMatcher(FeatureMatcher):
    """Returns fixed scores keyed by candidate id and counts its calls."""

    def __init__(self, scores):
        self.scores = scores
        self.calls = 0

    def match(self, target, candidates):
        self.calls += 1
        matches = Matches(candidates.schema)
        for candidate in candidates:
            if candidate.feature_id in self.scores:
                matches.add(candidate, self.scores[candidate.feature_id])
        return matches


def _as_dict(matches: Matches) -> dict:
    return {f.feature_id: s for f, s in matches.items()}


# ─── Leaf Scorers ────────────────────────────────────────────────────────────

def test_centroid_distance_linear_falloff():
    from geoconflate.modules.matching.scorers import CentroidDistanceMatcher
    m = CentroidDistanceMatcher(max_distance=100.0)
    assert m.score(Point(0, 0), Point(0, 0)) == 1.0
    assert m.score(Point(0, 0), Point(30, 40)) == pytest.approx(0.5)
    assert m.score(Point(0, 0), Point(200, 0)) == 0.0


def test_centroid_distance_zero_score_not_stored():
    from geoconflate.modules.matching.scorers import CentroidDistanceMatcher
    m = CentroidDistanceMatcher(max_distance=10.0)
    result = m.match(
        _feature("t", Point(0, 0)),
        _candidates(_feature(1, Point(1, 0)), _feature(2, Point(50, 0))),
    )
    assert list(_as_dict(result)) == [1]


@pytest.mark.parametrize("bad", [0.0, -5.0])
def test_distance_matchers_reject_non_positive_range(bad):
    from geoconflate.modules.matching.scorers import (
        CentroidDistanceMatcher,
        HausdorffDistanceMatcher,
    )
    with pytest.raises(ValueError):
        CentroidDistanceMatcher(bad)
    with pytest.raises(ValueError):
        HausdorffDistanceMatcher(bad)


def test_hausdorff_identical_and_shifted():
    from geoconflate.modules.matching.scorers import HausdorffDistanceMatcher
    m = HausdorffDistanceMatcher(max_distance=10.0)
    line = LineString([(0, 0), (10, 0)])
    assert m.score(line, line) == 1.0
    assert m.score(line, translate(line, yoff=5)) == pytest.approx(0.5)
    assert m.score(line, LineString()) == 0.0


def test_symdiff_identical_disjoint_and_partial():
    from geoconflate.modules.matching.scorers import SymDiffMatcher
    m = SymDiffMatcher()
    a = box(0, 0, 2, 2)
    assert m.score(a, box(0, 0, 2, 2)) == pytest.approx(1.0)
    assert m.score(a, box(10, 10, 12, 12)) == 0.0
    # union 6, symmetric difference 4
    assert m.score(a, box(1, 0, 3, 2)) == pytest.approx(1.0 / 3.0)


def test_symdiff_zero_area_geometries_score_zero():
    from geoconflate.modules.matching.scorers import SymDiffMatcher
    m = SymDiffMatcher()
    assert m.score(Point(0, 0), Point(0, 0)) == 0.0
    assert m.score(Polygon(), box(0, 0, 1, 1)) == 0.0


def test_symdiff_repairs_invalid_polygon():
    from geoconflate.modules.matching.scorers import SymDiffMatcher
    bowtie = Polygon([(0, 0), (2, 2), (2, 0), (0, 2)])
    score = SymDiffMatcher().score(bowtie, box(0, 0, 2, 2))
    assert 0.0 <= score <= 1.0


def test_attribute_matcher_case_insensitive():
    from geoconflate.modules.matching.scorers import AttributeMatcher
    m = AttributeMatcher("name")
    result = m.match(
        _feature("t", Point(0, 0), name=" Main St "),
        _candidates(
            _feature(1, Point(0, 0), name="main st"),
            _feature(2, Point(0, 0), name="High St"),
            _feature(3, Point(0, 0)),
        ),
    )
    assert _as_dict(result) == {1: 1.0}


def test_attribute_matcher_case_sensitive():
    from geoconflate.modules.matching.scorers import AttributeMatcher
    m = AttributeMatcher("name", case_sensitive=True)
    result = m.match(
        _feature("t", Point(0, 0), name="Main St"),
        _candidates(_feature(1, Point(0, 0), name="main st")),
    )
    assert result.is_empty()


def test_attribute_matcher_empty_value_never_matches():
    from geoconflate.modules.matching.scorers import AttributeMatcher
    result = AttributeMatcher("name").match(
        _feature("t", Point(0, 0), name=""),
        _candidates(_feature(1, Point(0, 0), name="")),
    )
    assert result.is_empty()


# ─── Weighted Matcher ────────────────────────────────────────────────────────

def test_weighted_zero_weight_matcher_never_invoked():
    from geoconflate.modules.matching.weighted_matcher import WeightedMatcher
    m1 = _StubMatcher({1: 0.8, 2: 0.4})
    m2 = _StubMatcher({1: 1.0, 2: 1.0})
    weighted = WeightedMatcher([(m1, 1.0), (m2, 0.0)])

    cands = _candidates(_feature(1, Point(0, 0)), _feature(2, Point(1, 1)))
    result = weighted.match(_feature("t", Point(0, 0)), cands)

    assert m2.calls == 0
    assert _as_dict(result) == _as_dict(m1.match(_feature("t", Point(0, 0)), cands))


def test_weighted_aggregate_with_partial_coverage():
    from geoconflate.modules.matching.weighted_matcher import WeightedMatcher
    m1 = _StubMatcher({1: 1.0, 2: 0.5})
    m2 = _StubMatcher({1: 0.5})
    weighted = WeightedMatcher([(m1, 1.0), (m2, 3.0)])

    result = weighted.match(
        _feature("t", Point(0, 0)),
        _candidates(_feature(1, Point(0, 0)), _feature(2, Point(0, 0))),
    )
    scores = _as_dict(result)
    assert scores[1] == pytest.approx(0.25 * 1.0 + 0.75 * 0.5)
    # Candidate 2 is only scored by m1
    assert scores[2] == pytest.approx(0.25 * 0.5)


@pytest.mark.parametrize("s1,s2,s3", [
    (1.0, 1.0, 1.0),
    (0.3, 0.0, 0.9),
    (0.1, 0.7, 0.0),
    (0.0, 0.0, 0.2),
])
def test_weighted_aggregate_equals_normalised_sum(s1, s2, s3):
    from geoconflate.modules.matching.weighted_matcher import WeightedMatcher
    matchers = [_StubMatcher({1: s1}), _StubMatcher({1: s2}), _StubMatcher({1: s3})]
    weights = [0.1, 0.2, 0.7]
    weighted = WeightedMatcher(zip(matchers, weights))

    result = weighted.match(_feature("t", Point(0, 0)), _candidates(_feature(1, Point(0, 0))))
    expected = sum(weighted.normalized_weight(m) * s for m, s in zip(matchers, (s1, s2, s3)))
    assert result.score_for(_feature(1, Point(0, 0))) == pytest.approx(expected)
    assert result.top_score <= 1.0


def test_weighted_all_zero_weights_yields_empty():
    from geoconflate.modules.matching.weighted_matcher import WeightedMatcher
    m1 = _StubMatcher({1: 1.0})
    weighted = WeightedMatcher([(m1, 0.0)])
    result = weighted.match(_feature("t", Point(0, 0)), _candidates(_feature(1, Point(0, 0))))
    assert result.is_empty()
    assert m1.calls == 0
    assert weighted.weight_total == 0.0


def test_weighted_rejects_negative_weight():
    from geoconflate.modules.matching.weighted_matcher import WeightedMatcher
    with pytest.raises(ValueError):
        WeightedMatcher([(_StubMatcher({}), -1.0)])


def test_weighted_reregistration_replaces_weight():
    from geoconflate.modules.matching.weighted_matcher import WeightedMatcher
    m1 = _StubMatcher({})
    m2 = _StubMatcher({})
    weighted = WeightedMatcher([(m1, 1.0), (m2, 1.0), (m1, 3.0), (m2, 0.0)])
    assert weighted.matchers == [m1]
    assert weighted.weight(m1) == 3.0
    assert weighted.weight(m2) == 0.0
    assert weighted.normalized_weight(m1) == 1.0


def test_weighted_add_after_construction():
    from geoconflate.modules.matching.weighted_matcher import WeightedMatcher
    m1 = _StubMatcher({1: 1.0})
    m2 = _StubMatcher({1: 0.5})
    weighted = WeightedMatcher([(m1, 1.0)])
    weighted.add(m2, 1.0)
    result = weighted.match(_feature("t", Point(0, 0)), _candidates(_feature(1, Point(0, 0))))
    assert weighted.matchers == [m1, m2]
    assert result.top_score == pytest.approx(0.75)


def test_weighted_normalised_weights_sum_to_one():
    from geoconflate.modules.matching.weighted_matcher import WeightedMatcher
    matchers = [_StubMatcher({}) for _ in range(4)]
    weighted = WeightedMatcher(zip(matchers, [1.0, 2.0, 3.0, 4.0]))
    assert sum(weighted.normalized_weight(m) for m in matchers) == pytest.approx(1.0)


def test_weighted_output_order_is_by_identity():
    from geoconflate.modules.matching.weighted_matcher import WeightedMatcher
    m1 = _StubMatcher({"b": 0.5, 3: 0.5})
    m2 = _StubMatcher({"a": 0.5, 1: 0.5})
    weighted = WeightedMatcher([(m1, 1.0), (m2, 1.0)])
    cands = _candidates(
        _feature("b", Point(0, 0)), _feature(3, Point(0, 0)),
        _feature("a", Point(0, 0)), _feature(1, Point(0, 0)),
    )
    first = weighted.match(_feature("t", Point(0, 0)), cands)
    second = weighted.match(_feature("t", Point(0, 0)), cands)
    assert [f.feature_id for f in first] == [1, 3, "a", "b"]
    assert first.scores == second.scores


def test_weighted_real_scorers_stay_in_range():
    from geoconflate.modules.matching.centroid_aligner import CentroidAligner
    from geoconflate.modules.matching.scorers import (
        CentroidDistanceMatcher,
        HausdorffDistanceMatcher,
        SymDiffMatcher,
    )
    from geoconflate.modules.matching.weighted_matcher import WeightedMatcher
    weighted = WeightedMatcher([
        (CentroidDistanceMatcher(50.0), 1.0),
        (CentroidAligner(SymDiffMatcher()), 2.0),
        (HausdorffDistanceMatcher(50.0), 0.5),
    ])
    cands = _candidates(*[_feature(i, box(i, i, i + 4, i + 3)) for i in range(10)])
    result = weighted.match(_feature("t", box(0, 0, 4, 4)), cands)
    assert len(result) == 10
    assert all(0.0 < s <= 1.0 for s in result.scores)


# ─── Centroid Aligner ────────────────────────────────────────────────────────

def test_aligner_ignores_translation():
    from geoconflate.modules.matching.centroid_aligner import CentroidAligner
    from geoconflate.modules.matching.scorers import SymDiffMatcher
    aligner = CentroidAligner(SymDiffMatcher())
    a = box(0, 0, 4, 2)
    assert aligner.score(a, translate(a, 1000, -500)) == pytest.approx(1.0)


def test_aligner_does_not_modify_inputs():
    from geoconflate.modules.matching.centroid_aligner import CentroidAligner
    from geoconflate.modules.matching.scorers import SymDiffMatcher
    target = _feature("t", box(10, 10, 14, 12))
    candidate = _feature(1, box(50, 50, 53, 52))
    before = (target.geometry.wkt, candidate.geometry.wkt)

    CentroidAligner(SymDiffMatcher()).match(target, _candidates(candidate))

    assert (target.geometry.wkt, candidate.geometry.wkt) == before


def test_aligner_is_idempotent():
    from geoconflate.modules.matching.centroid_aligner import CentroidAligner
    geom = Polygon([(3, 3), (9, 4), (7, 8)])
    once = CentroidAligner.align(geom)
    twice = CentroidAligner.align(once)
    assert once.equals_exact(twice, 1e-9)


def test_aligner_translation_invariance_of_score():
    from geoconflate.modules.matching.centroid_aligner import CentroidAligner
    from geoconflate.modules.matching.scorers import HausdorffDistanceMatcher
    aligner = CentroidAligner(HausdorffDistanceMatcher(10.0))
    a = box(0, 0, 4, 2)
    b = box(0, 0, 3, 3)
    base = aligner.score(a, b)
    moved = aligner.score(translate(a, 7, 7), translate(b, -40, 12))
    assert moved == pytest.approx(base)


def test_aligner_exposes_inner_matcher():
    from geoconflate.modules.matching.centroid_aligner import CentroidAligner
    from geoconflate.modules.matching.scorers import SymDiffMatcher
    inner = SymDiffMatcher()
    assert CentroidAligner(inner).inner is inner
