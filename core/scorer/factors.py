#!/usr/bin/env python3
"""
Factor Calculations - One function per scoring dimension.

Each factor returns a FactorResult when both the profile and the tender
carry data for that dimension, or None when the dimension is not
applicable. Inapplicable dimensions are left out of both the achieved
points and the applicable weight.

Dimensions:
- Industry category (substring match, either direction)
- Province (exact match or "National" wildcard)
- Value range overlap (proportional to the tender range)
- CIDB grade (profile meets or exceeds requirement)
- B-BBEE level (profile numerically at or below requirement)
"""

from typing import Iterable, List, Optional
import logging
import re

from core.scorer.models import BusinessProfileDTO, TenderDTO, FactorResult

logger = logging.getLogger(__name__)

NATIONAL_PROVINCE = "National"

FACTOR_INDUSTRY = 'industry'
FACTOR_PROVINCE = 'province'
FACTOR_VALUE_RANGE = 'value_range'
FACTOR_CIDB = 'cidb_grade'
FACTOR_BBBEE = 'bbbee_level'

_NUMBER_PATTERN = re.compile(r"(\d+)")


def extract_level_number(label: Optional[str]) -> Optional[int]:
    """Return the first integer found in a grade/level label, e.g. "Grade 8" -> 8."""
    if not label:
        return None
    match = _NUMBER_PATTERN.search(str(label))
    return int(match.group(1)) if match else None


def _clean_labels(labels: Optional[Iterable[str]]) -> List[str]:
    if not labels:
        return []
    return [label.strip() for label in labels if label and label.strip()]


def industry_factor(
    profile: BusinessProfileDTO,
    tender: TenderDTO,
    weight: float
) -> Optional[FactorResult]:
    categories = _clean_labels(profile.industry_categories)
    tender_category = (tender.category or '').strip()
    if not categories or not tender_category:
        return None

    tender_lower = tender_category.lower()
    matched = any(
        cat.lower() in tender_lower or tender_lower in cat.lower()
        for cat in categories
    )
    if not matched:
        return FactorResult(key=FACTOR_INDUSTRY, weight=weight, points=0.0)

    return FactorResult(
        key=FACTOR_INDUSTRY,
        weight=weight,
        points=weight,
        reason=f"Industry match: {tender_category}"
    )


def province_factor(
    profile: BusinessProfileDTO,
    tender: TenderDTO,
    weight: float
) -> Optional[FactorResult]:
    provinces = _clean_labels(profile.provinces)
    tender_province = (tender.province or '').strip()
    if not provinces or not tender_province:
        return None

    matched = (
        tender_province in provinces
        or NATIONAL_PROVINCE in provinces
        or tender_province == NATIONAL_PROVINCE
    )
    if not matched:
        return FactorResult(key=FACTOR_PROVINCE, weight=weight, points=0.0)

    return FactorResult(
        key=FACTOR_PROVINCE,
        weight=weight,
        points=weight,
        reason=f"Location match: {tender_province}"
    )


def value_range_factor(
    profile: BusinessProfileDTO,
    tender: TenderDTO,
    weight: float
) -> Optional[FactorResult]:
    """
    Score the overlap between the preferred and the advertised value range.

    Credit = overlap width / tender range width * weight, capped at weight.
    A zero-width tender range (single advertised value) earns full credit
    when that value falls inside the preferred range.
    """
    bounds = (
        profile.preferred_value_min,
        profile.preferred_value_max,
        tender.value_min,
        tender.value_max,
    )
    if any(b is None for b in bounds):
        return None

    profile_min, profile_max, tender_min, tender_max = (float(b) for b in bounds)
    if tender_min > tender_max:
        logger.debug(f"Tender {tender.id} has inverted value range, skipping value factor")
        return None

    if profile_min > tender_max or profile_max < tender_min:
        return FactorResult(key=FACTOR_VALUE_RANGE, weight=weight, points=0.0)

    tender_width = tender_max - tender_min
    if tender_width == 0:
        points = weight
    else:
        overlap_width = min(profile_max, tender_max) - max(profile_min, tender_min)
        points = min(weight, (overlap_width / tender_width) * weight)

    if points <= 0:
        return FactorResult(key=FACTOR_VALUE_RANGE, weight=weight, points=0.0)

    return FactorResult(
        key=FACTOR_VALUE_RANGE,
        weight=weight,
        points=points,
        reason="Value range within your preferences"
    )


def cidb_factor(
    profile: BusinessProfileDTO,
    tender: TenderDTO,
    weight: float
) -> Optional[FactorResult]:
    profile_grade = extract_level_number(profile.cidb_grading)
    required_grade = extract_level_number(tender.cidb_required)
    if profile_grade is None or required_grade is None:
        return None

    # Higher grade = higher capacity
    if profile_grade < required_grade:
        return FactorResult(key=FACTOR_CIDB, weight=weight, points=0.0)

    return FactorResult(
        key=FACTOR_CIDB,
        weight=weight,
        points=weight,
        reason=f"CIDB qualification meets requirement ({tender.cidb_required})"
    )


def bbbee_factor(
    profile: BusinessProfileDTO,
    tender: TenderDTO,
    weight: float
) -> Optional[FactorResult]:
    profile_level = extract_level_number(profile.bbbee_level)
    required_level = extract_level_number(tender.bbbee_required)
    if profile_level is None or required_level is None:
        return None

    # Lower level = higher compliance
    if profile_level > required_level:
        return FactorResult(key=FACTOR_BBBEE, weight=weight, points=0.0)

    return FactorResult(
        key=FACTOR_BBBEE,
        weight=weight,
        points=weight,
        reason=f"B-BBEE level meets requirement ({tender.bbbee_required})"
    )
