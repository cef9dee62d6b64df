"""Aggregate pair verdicts into compliance reports.

Two entry points:
- check_compliance(): explicit mode, the cross-product of chosen catalog
  features and laws (feature-major, law-minor).
- check_feature(): discovery mode, one ad-hoc feature screened against the
  whole law catalog, then evaluated against the relevant laws only.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Iterable, Protocol, Sequence

from ..services.errors import CatalogNotReadyError, ValidationError
from .pair_evaluator import PairEvaluator
from .relevance_screener import RelevanceScreener
from .types import (
    ComplianceReport,
    ComplianceStatus,
    ComplianceSummary,
    EvaluationOptions,
    Feature,
    Law,
    Verdict,
)

logger = logging.getLogger(__name__)


class CatalogSource(Protocol):
    def get_laws(self) -> list[Law]: ...

    def get_features(self) -> list[Feature]: ...


def risk_score(non_compliant: int, requires_review: int, total: int) -> int:
    """Share of verdicts that are not compliant, as 0-100. 0 when nothing was checked."""
    if total <= 0:
        return 0
    return round(100 * (non_compliant + requires_review) / total)


def summarize(
    verdicts: Sequence[Verdict],
    *,
    total_features: int,
    total_laws: int,
    relevant_laws: int,
) -> ComplianceSummary:
    counts = {status: 0 for status in ComplianceStatus}
    for verdict in verdicts:
        counts[verdict.status] += 1

    non_compliant = counts[ComplianceStatus.NON_COMPLIANT]
    review = counts[ComplianceStatus.REQUIRES_REVIEW]
    return ComplianceSummary(
        total_features=total_features,
        total_laws=total_laws,
        relevant_laws=relevant_laws,
        compliant_count=counts[ComplianceStatus.COMPLIANT],
        non_compliant_count=non_compliant,
        review_required_count=review,
        overall_risk_score=risk_score(non_compliant, review, len(verdicts)),
    )


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _select_features(features: Sequence[Feature], names: Iterable[str] | None) -> list[Feature]:
    if names is None:
        return list(features)
    wanted = {n.strip().lower() for n in names if n and n.strip()}
    selected = [f for f in features if f.name.strip().lower() in wanted]
    unknown = wanted - {f.name.strip().lower() for f in selected}
    if unknown:
        logger.warning("Skipping unknown features: %s", sorted(unknown))
    return selected


def _select_laws(laws: Sequence[Law], titles: Iterable[str] | None) -> list[Law]:
    if titles is None:
        return list(laws)
    wanted = set(titles)
    selected = [law for law in laws if law.title in wanted]
    unknown = wanted - {law.title for law in selected}
    if unknown:
        logger.warning("Skipping unknown laws: %s", sorted(unknown))
    return selected


class ComplianceAggregator:
    """Run the evaluator over a set of pairs and fold the verdicts into a report."""

    def __init__(
        self,
        catalog: CatalogSource,
        screener: RelevanceScreener,
        evaluator: PairEvaluator,
        *,
        max_workers: int = 1,
    ):
        self._catalog = catalog
        self._screener = screener
        self._evaluator = evaluator
        self.max_workers = max(1, int(max_workers))

    def _evaluate_pairs(
        self,
        pairs: Sequence[tuple[Feature, Law]],
        options: EvaluationOptions,
    ) -> tuple[Verdict, ...]:
        if not pairs:
            return ()

        def _run(pair: tuple[Feature, Law]) -> Verdict:
            feature, law = pair
            return self._evaluator.evaluate(feature, law, options)

        if self.max_workers == 1 or len(pairs) == 1:
            return tuple(_run(p) for p in pairs)

        # map() yields in submission order, keeping feature-major, law-minor.
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(pairs))) as pool:
            return tuple(pool.map(_run, pairs))

    def check_compliance(
        self,
        feature_names: Iterable[str] | None = None,
        law_titles: Iterable[str] | None = None,
        options: EvaluationOptions | None = None,
    ) -> ComplianceReport:
        """Explicit mode. None selects everything, an empty list selects nothing.

        Raises:
            CatalogNotReadyError: the catalog has no laws or no features
        """
        options = options or EvaluationOptions()
        laws = self._catalog.get_laws()
        features = self._catalog.get_features()
        if not laws or not features:
            raise CatalogNotReadyError(
                "No laws or features found. Please check your data files."
            )

        target_features = _select_features(features, feature_names)
        target_laws = _select_laws(laws, law_titles)
        pairs = [(f, law) for f in target_features for law in target_laws]

        logger.info(
            "Compliance check: %d features x %d laws = %d pairs",
            len(target_features), len(target_laws), len(pairs),
        )
        verdicts = self._evaluate_pairs(pairs, options)

        return ComplianceReport(
            mode="explicit",
            results=verdicts,
            summary=summarize(
                verdicts,
                total_features=len(target_features),
                total_laws=len(target_laws),
                relevant_laws=len(target_laws),
            ),
            timestamp=_utc_timestamp(),
        )

    def check_feature(
        self,
        name: str,
        description: str,
        options: EvaluationOptions | None = None,
    ) -> ComplianceReport:
        """Discovery mode for one ad-hoc feature.

        Raises:
            ValidationError: blank feature name
            CatalogNotReadyError: the catalog has no laws
        """
        if not name or not name.strip():
            raise ValidationError("Feature name is required")

        options = options or EvaluationOptions()
        laws = self._catalog.get_laws()
        if not laws:
            raise CatalogNotReadyError("No laws found. Please check your data files.")

        feature = Feature(name=name.strip(), description=(description or "").strip())
        screening = self._screener.screen(feature, laws)

        screened_titles = {law.title for law in screening.laws}
        relevant = [law for law in laws if law.title in screened_titles]

        if relevant:
            verdicts = self._evaluate_pairs([(feature, law) for law in relevant], options)
        else:
            logger.info("No relevant laws for '%s'; skipping evaluation", feature.name)
            verdicts = ()

        return ComplianceReport(
            mode="discovery",
            results=verdicts,
            summary=summarize(
                verdicts,
                total_features=1,
                total_laws=len(laws),
                relevant_laws=len(relevant),
            ),
            timestamp=_utc_timestamp(),
            screening=screening,
        )
