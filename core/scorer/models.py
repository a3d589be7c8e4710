#!/usr/bin/env python3
"""
Scoring Models - Typed records consumed and produced by the scoring engine.

Profiles and tenders are plain dataclasses built at the store boundary,
so the engine never touches ORM objects or database sessions.
"""

from typing import List, Optional
from dataclasses import dataclass, field
from datetime import datetime

from core.exceptions import InvalidProfileError


@dataclass
class BusinessProfileDTO:
    """A business profile as seen by the matching engine."""
    user_id: str
    industry_categories: List[str] = field(default_factory=list)
    provinces: List[str] = field(default_factory=list)
    preferred_value_min: Optional[float] = None
    preferred_value_max: Optional[float] = None
    cidb_grading: Optional[str] = None
    bbbee_level: Optional[str] = None
    email_notifications: bool = True
    sms_notifications: bool = False
    contact_email: Optional[str] = None
    phone_number: Optional[str] = None
    business_name: Optional[str] = None

    def __post_init__(self):
        if (
            self.preferred_value_min is not None
            and self.preferred_value_max is not None
            and self.preferred_value_min > self.preferred_value_max
        ):
            raise InvalidProfileError(
                f"Profile for user {self.user_id} has preferred value min "
                f"{self.preferred_value_min} above max {self.preferred_value_max}"
            )


@dataclass
class TenderDTO:
    """A procurement opportunity as seen by the matching engine."""
    id: int
    title: str
    ocid: Optional[str] = None
    description: Optional[str] = None
    department: Optional[str] = None
    category: Optional[str] = None
    province: Optional[str] = None
    value_min: Optional[float] = None
    value_max: Optional[float] = None
    closing_date: Optional[datetime] = None
    advertised_date: Optional[datetime] = None
    status: str = "active"
    cidb_required: Optional[str] = None
    bbbee_required: Optional[str] = None
    is_active: bool = True


@dataclass
class FactorResult:
    """Outcome of one applicable scoring dimension."""
    key: str
    weight: float
    points: float
    reason: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.points > 0


@dataclass
class TenderScore:
    """Final score for a (profile, tender) pair."""
    score: int
    reasons: List[str] = field(default_factory=list)
    factors: List[FactorResult] = field(default_factory=list)

    @property
    def applicable_weight(self) -> float:
        return sum(f.weight for f in self.factors)
