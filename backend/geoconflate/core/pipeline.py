# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Pipeline Orchestrator
Builds the configured match finder and runs one conflation pass.

Finder layout (from settings):
  Disambiguating                       (if DISAMBIGUATE)
    └─ Basic(search_buffer, match_workers)
         └─ Weighted
              ├─ CentroidDistanceMatcher            WEIGHT_CENTROID_DISTANCE
              ├─ CentroidAligner(SymDiffMatcher)    WEIGHT_ALIGNED_SYMDIFF
              ├─ HausdorffDistanceMatcher           WEIGHT_HAUSDORFF
              └─ AttributeMatcher(MATCH_ATTRIBUTE)  WEIGHT_ATTRIBUTE

The subject collection is indexed once per run so the per-target
candidate window is an STRtree query.
"""

from __future__ import annotations

import traceback
import uuid

import structlog

from geoconflate.config import Settings, get_settings
from geoconflate.core.task_monitor import NullTaskMonitor, TaskMonitor
from geoconflate.models.collection import FeatureCollection, IndexedFeatureCollection
from geoconflate.models.match import SimpleMatch
from geoconflate.modules.matching.base import FCMatchFinder, FeatureMatcher
from geoconflate.modules.matching.centroid_aligner import CentroidAligner
from geoconflate.modules.matching.disambiguation import DisambiguatingFCMatchFinder
from geoconflate.modules.matching.finders import BasicFCMatchFinder
from geoconflate.modules.matching.matcher import generate_matches
from geoconflate.modules.matching.scorers import (
    AttributeMatcher,
    CentroidDistanceMatcher,
    HausdorffDistanceMatcher,
    SymDiffMatcher,
)
from geoconflate.modules.matching.weighted_matcher import WeightedMatcher
from geoconflate.utils.logger import get_logger

log = get_logger(__name__)


def build_weighted_matcher(settings: Settings | None = None) -> WeightedMatcher:
    """Weighted combination of the scorers enabled in settings."""
    settings = settings or get_settings()

    matchers: list[tuple[FeatureMatcher, float]] = [
        (CentroidDistanceMatcher(settings.centroid_max_distance), settings.weight_centroid_distance),
        (CentroidAligner(SymDiffMatcher()), settings.weight_aligned_symdiff),
        (HausdorffDistanceMatcher(settings.hausdorff_max_distance), settings.weight_hausdorff),
    ]
    if settings.match_attribute:
        matchers.append(
            (AttributeMatcher(settings.match_attribute), settings.weight_attribute)
        )
    elif settings.weight_attribute > 0:
        log.warning("attribute_weight_ignored", reason="match_attribute not set")

    return WeightedMatcher(matchers)


def build_match_finder(settings: Settings | None = None) -> FCMatchFinder:
    """Assemble the collection match finder described by settings."""
    settings = settings or get_settings()

    finder: FCMatchFinder = BasicFCMatchFinder(
        build_weighted_matcher(settings),
        search_buffer=settings.search_buffer,
        max_workers=settings.match_workers,
    )
    if settings.disambiguate:
        finder = DisambiguatingFCMatchFinder(finder)

    log.debug(
        "match_finder_built",
        finder=type(finder).__name__,
        search_buffer=settings.search_buffer,
        workers=settings.match_workers,
    )
    return finder


def run_conflation(
    reference: FeatureCollection,
    subject: FeatureCollection,
    settings: Settings | None = None,
    monitor: TaskMonitor | None = None,
    run_id: str | None = None,
) -> list[SimpleMatch]:
    """
    Match reference features against subject features with the configured
    finder. Every log entry emitted during the run carries run_id.

    Raises:
        Whatever the matching core raises, after logging conflation_failed.
    """
    settings = settings or get_settings()
    monitor = monitor or NullTaskMonitor()
    run_id = run_id or uuid.uuid4().hex[:12]

    structlog.contextvars.bind_contextvars(run_id=run_id)
    try:
        log.info(
            "conflation_start",
            n_reference=len(reference),
            n_subject=len(subject),
            disambiguate=settings.disambiguate,
        )
        finder = build_match_finder(settings)
        pairs = generate_matches(
            reference,
            IndexedFeatureCollection(subject),
            finder,
            monitor,
            threshold=settings.confidence_threshold,
        )
        log.info("conflation_complete", pairs=len(pairs))
        return pairs
    except Exception as exc:
        log.error(
            "conflation_failed",
            error=f"{type(exc).__name__}: {exc}",
            traceback=traceback.format_exc(),
        )
        raise
    finally:
        structlog.contextvars.unbind_contextvars("run_id")
