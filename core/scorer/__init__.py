#!/usr/bin/env python3
"""
Scoring Module - Pure tender compatibility scoring.

Public API:
- ScoringEngine: Weighted multi-factor scorer
- score_tender: Convenience wrapper using default weights
- BusinessProfileDTO, TenderDTO: Typed inputs
- TenderScore, FactorResult: Scoring outputs

Modules:
- models.py: Data structures for profiles, tenders and scores
- factors.py: One function per scoring dimension
- service.py: ScoringEngine orchestrating the factors and reasons
"""

from core.scorer.models import BusinessProfileDTO, TenderDTO, FactorResult, TenderScore
from core.scorer.service import ScoringEngine, score_tender, headline_for_score

__all__ = [
    'ScoringEngine',
    'score_tender',
    'headline_for_score',
    'BusinessProfileDTO',
    'TenderDTO',
    'FactorResult',
    'TenderScore',
]
