"""Service container: build every collaborator once and wire them together."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..common.config_loader import Settings, load_settings
from ..engine.aggregator import ComplianceAggregator
from ..engine.llm_client import ChatCompletionClient
from ..engine.pair_evaluator import PairEvaluator
from ..engine.relevance_screener import CompleteFn, RelevanceScreener
from .abbreviations import AbbreviationGlossary
from .catalog_store import CatalogStore
from .correction_store import CorrectionStore

logger = logging.getLogger(__name__)


@dataclass
class ComplianceServices:
    settings: Settings
    catalog: CatalogStore
    corrections: CorrectionStore
    glossary: AbbreviationGlossary
    screener: RelevanceScreener
    evaluator: PairEvaluator
    aggregator: ComplianceAggregator

    def refresh(self) -> None:
        """Reload catalog tables and the glossary from disk."""
        self.catalog.refresh()
        self.glossary.load()


def build_services(
    settings: Settings | None = None,
    *,
    complete_fn: CompleteFn | None = None,
    load: bool = True,
) -> ComplianceServices:
    """Construct the full service graph.

    Args:
        settings: Defaults to load_settings()
        complete_fn: Model call override (tests); defaults to an OpenAI client
        load: Load catalog and glossary immediately
    """
    settings = settings or load_settings()

    if complete_fn is None:
        complete_fn = ChatCompletionClient(settings)

    catalog = CatalogStore(settings.laws_csv_path, settings.features_csv_path, settings.csv_delimiter)
    corrections = CorrectionStore(settings.corrections_json_path)
    glossary = AbbreviationGlossary(settings.abbreviations_json_path)

    screener = RelevanceScreener(
        complete_fn,
        temperature=settings.screening_temperature,
        max_tokens=settings.screening_max_tokens,
    )
    evaluator = PairEvaluator(
        complete_fn,
        corrections,
        glossary,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )
    aggregator = ComplianceAggregator(catalog, screener, evaluator, max_workers=settings.max_workers)

    services = ComplianceServices(
        settings=settings,
        catalog=catalog,
        corrections=corrections,
        glossary=glossary,
        screener=screener,
        evaluator=evaluator,
        aggregator=aggregator,
    )
    if load:
        services.refresh()
        if not catalog.is_ready():
            logger.warning("Catalog data not ready; check %s and %s", catalog.laws_path, catalog.features_path)
    return services
