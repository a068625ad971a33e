"""Weighted semantic + keyword + context confidence scorer."""

import logging
from dataclasses import replace
from typing import Callable, List, Optional

from ..cache import ContextCache
from ..config import (
    CONFIDENCE_CACHE_MAX_SIZE,
    CONFIDENCE_CACHE_TTL_MS,
    RETRY_INITIAL_DELAY,
    RETRY_MAX_RETRIES,
)
from ..exceptions import ConfidenceServiceError
from ..models import (
    ConfidenceExplanation,
    ConfidenceResult,
    ExplanationFactor,
    ScoreBreakdown,
    ScoreMetadata,
)
from ..utils import retry_with_backoff
from .base import ConfidenceScorer, ContextAccessor, threshold_label
from .semantic import SemanticSimilarity

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "confidence"
RECENT_USE_MS = 5 * 60 * 1000
SEMANTIC_FLOOR = 0.3

DEFAULT_WEIGHTS = ScoreBreakdown(semantic=0.6, keyword=0.3, context=0.1)

EXPLANATIONS = {
    "HIGH": "Very high confidence match based on strong semantic similarity and keyword matches.",
    "MEDIUM": "Good confidence match with moderate semantic and keyword alignment.",
    "LOW": "Possible match based on partial keyword or context signals.",
    "BELOW_THRESHOLD": "Low confidence match - consider alternative routing.",
}


def weighted_score(scores: ScoreBreakdown, weights: ScoreBreakdown) -> float:
    """
    Combine the three signals.

    Semantic similarity only counts above 0.3; when it does, the keyword
    signal is halved.
    """
    if scores.semantic > SEMANTIC_FLOOR:
        semantic = scores.semantic
        keyword = scores.keyword * 0.5
    else:
        semantic = 0.0
        keyword = scores.keyword
    return semantic * weights.semantic + keyword * weights.keyword + scores.context * weights.context


class HybridConfidenceScorer(ConfidenceScorer):
    """Default scorer: semantic similarity, adapter keyword confidence and usage context."""

    def __init__(
        self,
        semantic: Optional[SemanticSimilarity] = None,
        weights: Optional[ScoreBreakdown] = None,
        cache_ttl_ms: int = CONFIDENCE_CACHE_TTL_MS,
        cache_max_size: int = CONFIDENCE_CACHE_MAX_SIZE,
        max_retries: int = RETRY_MAX_RETRIES,
        retry_delay: float = RETRY_INITIAL_DELAY,
        clock: Optional[Callable[[], int]] = None
    ):
        """
        Initialize the scorer.

        Args:
            semantic: Similarity provider (defaults to SemanticSimilarity)
            weights: Signal weights (defaults to 0.6 / 0.3 / 0.1)
            cache_ttl_ms: How long scores for a query are reused
            cache_max_size: Maximum number of cached queries
            max_retries: Retries for a failing similarity provider
            retry_delay: Delay before the first retry, in seconds
            clock: Callable returning epoch milliseconds
        """
        self.semantic = semantic or SemanticSimilarity()
        self.weights = weights or DEFAULT_WEIGHTS
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._cache = ContextCache(default_ttl=cache_ttl_ms, max_entries=cache_max_size, clock=clock)

    @staticmethod
    def cache_key(query: str) -> str:
        return query.lower().strip()

    async def calculate_confidence(
        self,
        query: str,
        adapters: List,
        context_accessor: ContextAccessor
    ) -> List[ConfidenceResult]:
        key = self.cache_key(query)
        app_names = tuple(adapter.app_name for adapter in adapters)

        cached = self._cache.get(CACHE_NAMESPACE, key)
        # Scores computed for a different adapter set are not reused
        if cached is not None and cached[0] == app_names:
            return [
                replace(result, metadata=replace(result.metadata, cache_hit=True))
                for result in cached[1]
            ]

        semantic_scores = await self._semantic_scores(key, adapters)

        results = []
        for adapter in adapters:
            context = context_accessor(adapter.app_name)
            breakdown = ScoreBreakdown(
                semantic=semantic_scores.get(adapter.app_name, 0.0),
                keyword=await adapter.get_confidence(key),
                context=self._context_score(context),
            )
            results.append(ConfidenceResult(
                adapter=adapter,
                total_score=weighted_score(breakdown, self.weights),
                breakdown=breakdown,
                weights=self.weights,
                metadata=ScoreMetadata(
                    is_active=bool(context and context.is_active),
                    last_used=context.last_used if context else 0,
                ),
            ))

        results.sort(key=lambda r: r.total_score, reverse=True)
        self._cache.set(CACHE_NAMESPACE, key, (app_names, results))

        logger.info(
            "Confidence for %r: %s",
            key,
            ", ".join(f"{r.adapter.app_name}={r.total_score:.2f}" for r in results[:3]) or "no adapters",
            extra={"component": "HybridConfidenceScorer", "action": "calculate_confidence"},
        )
        return results

    async def _semantic_scores(self, query: str, adapters: List):
        def log_retry(attempt: int, error: Exception) -> None:
            logger.warning(
                "Semantic similarity failed (attempt %d): %s",
                attempt,
                error,
                extra={"component": "HybridConfidenceScorer", "action": "semantic_scores"},
            )

        try:
            return await retry_with_backoff(
                lambda: self.semantic.score_adapters(query, adapters),
                max_retries=self.max_retries,
                initial_delay=self.retry_delay,
                on_retry=log_retry,
            )
        except Exception as e:
            raise ConfidenceServiceError(f"Semantic similarity unavailable: {e}") from e

    def _context_score(self, context) -> float:
        if context is None:
            return 0.0
        score = 0.0
        if context.is_active:
            score += 0.5
        if context.last_used > self._cache.now() - RECENT_USE_MS:
            score += 0.5
        return score

    def explain_confidence(self, query: str, adapter_name: str) -> ConfidenceExplanation:
        """
        Explain a score computed by a previous calculate_confidence() call.

        Args:
            query: Query the scores were computed for
            adapter_name: App name of the adapter to explain

        Returns:
            ConfidenceExplanation with one factor per signal

        Raises:
            ConfidenceServiceError: If no cached score exists for the pair
        """
        key = self.cache_key(query)
        cached = self._cache.get(CACHE_NAMESPACE, key)
        if cached is None:
            raise ConfidenceServiceError(f"No confidence scores cached for {key!r}")

        for result in cached[1]:
            if result.adapter.app_name == adapter_name:
                return self._explain(key, result)
        raise ConfidenceServiceError(f"No confidence score for '{adapter_name}' on {key!r}")

    def _explain(self, query: str, result: ConfidenceResult) -> ConfidenceExplanation:
        breakdown, weights = result.breakdown, result.weights

        if breakdown.semantic > 0.7:
            semantic_details = "Strong semantic match with intent embeddings"
        elif breakdown.semantic > 0.3:
            semantic_details = "Moderate semantic similarity"
        else:
            semantic_details = "Low semantic similarity"

        if breakdown.keyword > 0.8:
            keyword_details = "Strong keyword match"
        elif breakdown.keyword > 0.4:
            keyword_details = "Partial keyword match"
        else:
            keyword_details = "Minimal keyword overlap"

        signals = []
        if result.metadata.is_active:
            signals.append("app is currently active")
        if result.metadata.last_used and result.metadata.last_used > self._cache.now() - RECENT_USE_MS:
            signals.append("recently used")
        context_details = f"Context boost from: {', '.join(signals)}" if signals else "No context signals"

        factors = [
            ExplanationFactor(
                type=factor_type,
                score=score,
                weight=weight,
                contribution=score * weight,
                details=details,
            )
            for factor_type, score, weight, details in (
                ("semantic", breakdown.semantic, weights.semantic, semantic_details),
                ("keyword", breakdown.keyword, weights.keyword, keyword_details),
                ("context", breakdown.context, weights.context, context_details),
            )
        ]

        return ConfidenceExplanation(
            query=query,
            adapter=result.adapter.app_name,
            total_score=result.total_score,
            explanation=self.describe(result.total_score),
            factors=factors,
        )

    @staticmethod
    def describe(score: float) -> str:
        """Headline sentence for a score band."""
        return EXPLANATIONS[threshold_label(score)]

    def clear_cache(self) -> None:
        self._cache.invalidate_all()
