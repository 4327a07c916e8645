# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Collection Match Finder
Runs a FeatureMatcher for every target feature against the candidates
found near it.

Per target:
  1. Expand the target envelope by search_buffer
  2. Query the candidate collection with that window (spatial pre-filter)
  3. Score the hits with the configured FeatureMatcher

Targets are independent, so with max_workers > 1 they are scored on a
thread pool. Collections are read-only during the pass; each Matches is
owned by the task that builds it. Results are always published in target
collection order.

Cancellation is polled before each target is published. A cancelled run
returns the well-formed partial map built so far.
"""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor

from geoconflate.core.task_monitor import NullTaskMonitor, TaskMonitor
from geoconflate.models.collection import FeatureCollection
from geoconflate.models.feature import Feature, FeatureSchema
from geoconflate.models.matches import Matches
from geoconflate.modules.matching.base import FCMatchFinder, FeatureMatcher
from geoconflate.utils.geometry_utils import expand_envelope
from geoconflate.utils.logger import get_logger

log = get_logger(__name__)


def blank_target_to_matches_map(
    targets: Iterable[Feature],
    schema: FeatureSchema,
) -> dict[Feature, Matches]:
    """Map every target to an empty Matches over the candidate schema."""
    return {target: Matches(schema) for target in targets}


class BasicFCMatchFinder(FCMatchFinder):
    """Window pre-filter followed by one FeatureMatcher call per target."""

    def __init__(
        self,
        matcher: FeatureMatcher,
        search_buffer: float = 0.0,
        max_workers: int = 1,
    ) -> None:
        if search_buffer < 0:
            raise ValueError(f"search_buffer must be >= 0 (got {search_buffer})")
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1 (got {max_workers})")
        self.matcher = matcher
        self.search_buffer = float(search_buffer)
        self.max_workers = max_workers

    def candidates_for(
        self,
        target: Feature,
        candidate_fc: FeatureCollection,
    ) -> FeatureCollection:
        """Candidates whose envelopes intersect the buffered target envelope."""
        window = expand_envelope(target.envelope, self.search_buffer)
        hits = candidate_fc.query(window) if window is not None else []
        return FeatureCollection(candidate_fc.schema, hits)

    def _match_target(self, target: Feature, candidate_fc: FeatureCollection) -> Matches:
        return self.matcher.match(target, self.candidates_for(target, candidate_fc))

    def match(
        self,
        target_fc: FeatureCollection,
        candidate_fc: FeatureCollection,
        monitor: TaskMonitor | None = None,
    ) -> dict[Feature, Matches]:
        monitor = monitor or NullTaskMonitor()
        targets = target_fc.features

        log.info(
            "matching_start",
            n_targets=len(targets),
            n_candidates=len(candidate_fc),
            search_buffer=self.search_buffer,
            workers=self.max_workers,
        )
        monitor.report("Finding matches")

        if self.max_workers > 1 and len(targets) > 1:
            result, cancelled = self._match_parallel(targets, candidate_fc, monitor)
        else:
            result, cancelled = self._match_sequential(targets, candidate_fc, monitor)

        n_matched = sum(1 for m in result.values() if not m.is_empty())
        if cancelled:
            log.info("matching_cancelled", processed=len(result), n_targets=len(targets))
        else:
            log.info("matching_complete", n_targets=len(result), n_matched=n_matched)
        return result

    def _match_sequential(
        self,
        targets: list[Feature],
        candidate_fc: FeatureCollection,
        monitor: TaskMonitor,
    ) -> tuple[dict[Feature, Matches], bool]:
        result: dict[Feature, Matches] = {}
        total = len(targets)
        for i, target in enumerate(targets):
            if monitor.is_cancel_requested():
                return result, True
            result[target] = self._match_target(target, candidate_fc)
            monitor.report_progress(i + 1, total, "features")
        return result, False

    def _match_parallel(
        self,
        targets: list[Feature],
        candidate_fc: FeatureCollection,
        monitor: TaskMonitor,
    ) -> tuple[dict[Feature, Matches], bool]:
        result: dict[Feature, Matches] = {}
        total = len(targets)
        with ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="geoconflate-match",
        ) as pool:
            futures: list[Future[Matches]] = [
                pool.submit(self._match_target, target, candidate_fc)
                for target in targets
            ]
            try:
                for i, (target, future) in enumerate(zip(targets, futures)):
                    if monitor.is_cancel_requested():
                        _cancel_pending(futures[i:])
                        return result, True
                    result[target] = future.result()
                    monitor.report_progress(i + 1, total, "features")
            except BaseException:
                _cancel_pending(futures)
                raise
        return result, False


def _cancel_pending(futures: list[Future[Matches]]) -> None:
    for future in futures:
        future.cancel()
