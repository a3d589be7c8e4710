#!/usr/bin/env python3
"""
Scoring Engine - Weighted multi-factor compatibility scoring.

Maps a (business profile, tender) pair to an integer score in [0, 100]
plus an ordered list of human-readable reasons. Pure and deterministic:
no I/O, no shared mutable state, safe to call from many threads.

Score = round(100 * achieved_points / applicable_points), where only the
dimensions present on both sides contribute to applicable_points. A
profile matching fully on 2 of 5 applicable dimensions therefore scores
100, and a pair with nothing applicable scores 0.
"""

from typing import Callable, List, Optional, Tuple
import logging
import math

from core.config_loader import ScorerConfig
from core.scorer.models import BusinessProfileDTO, TenderDTO, FactorResult, TenderScore
from core.scorer import factors

logger = logging.getLogger(__name__)

FactorFn = Callable[[BusinessProfileDTO, TenderDTO, float], Optional[FactorResult]]

# Evaluation order is also the order reasons are reported in
FACTOR_PIPELINE: Tuple[Tuple[str, FactorFn], ...] = (
    ('industry', factors.industry_factor),
    ('province', factors.province_factor),
    ('value_range', factors.value_range_factor),
    ('cidb_grade', factors.cidb_factor),
    ('bbbee_level', factors.bbbee_factor),
)

HEADLINE_TIERS: Tuple[Tuple[int, str], ...] = (
    (90, "Excellent match for your business"),
    (70, "Good match for your business"),
    (50, "Potential match for your business"),
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def headline_for_score(score: int) -> Optional[str]:
    """Qualitative headline for a final score, or None below 50."""
    for threshold, headline in HEADLINE_TIERS:
        if score >= threshold:
            return headline
    return None


class ScoringEngine:
    """
    Stateless scorer for (profile, tender) pairs.

    Weights come from ScorerConfig.weights; the defaults are
    industry 30, province 20, value range 25, CIDB 15, B-BBEE 10.
    """

    def __init__(self, config: Optional[ScorerConfig] = None):
        self.config = config or ScorerConfig()
        self.weights = self.config.weights.model_dump()

    def evaluate_factors(
        self,
        profile: BusinessProfileDTO,
        tender: TenderDTO
    ) -> List[FactorResult]:
        """Evaluate every dimension, keeping only the applicable ones."""
        results = []
        for key, factor_fn in FACTOR_PIPELINE:
            weight = self.weights.get(key, 0.0)
            if weight <= 0:
                continue
            result = factor_fn(profile, tender, weight)
            if result is not None:
                results.append(result)
        return results

    def score(self, profile: BusinessProfileDTO, tender: TenderDTO) -> TenderScore:
        """Score one tender against one business profile."""
        factor_results = self.evaluate_factors(profile, tender)

        applicable = sum(f.weight for f in factor_results)
        achieved = sum(f.points for f in factor_results)
        score = _round_half_up(100.0 * achieved / applicable) if applicable > 0 else 0
        score = max(0, min(100, score))

        reasons = [f.reason for f in factor_results if f.matched and f.reason]
        headline = headline_for_score(score)
        if headline:
            reasons.insert(0, headline)

        logger.debug(
            f"Tender {tender.id} vs user {profile.user_id}: score={score} "
            f"(achieved={achieved:.1f}/{applicable:.0f})"
        )

        return TenderScore(score=score, reasons=reasons, factors=factor_results)


def score_tender(profile: BusinessProfileDTO, tender: TenderDTO) -> TenderScore:
    """Score with the default weights."""
    return ScoringEngine().score(profile, tender)
