#!/usr/bin/env python3
"""
Tests for SqlMatchingStore and the ORM-to-DTO converters.

The unit of work is replaced by a context manager yielding a MagicMock
repository, so no database is needed.
"""

import unittest
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

from core.exceptions import InvalidProfileError, MatchNotFoundException
from core.matcher.dto import MatchDTO, NotificationRequest, CHANNEL_EMAIL
from database.models import BusinessProfile, Tender, TenderMatch, User
from database.store import (
    SqlMatchingStore, profile_to_dto, tender_to_dto, user_to_contact, match_to_record
)


def make_store(repo, **kwargs):
    @contextmanager
    def fake_uow():
        yield repo

    return SqlMatchingStore(uow_factory=fake_uow, **kwargs)


def make_profile_row(**overrides):
    fields = dict(
        id=1,
        user_id="user-1",
        business_name="Acme Networks",
        cidb_grading="Grade 8",
        bbbee_level="Level 2",
        industry_categories=["Technology"],
        provinces=["Gauteng"],
        preferred_value_min=Decimal("100000.00"),
        preferred_value_max=Decimal("5000000.00"),
        contact_email=None,
        phone_number="+27821234567",
        email_notifications=True,
        sms_notifications=False,
    )
    fields.update(overrides)
    return BusinessProfile(**fields)


def make_tender_row(**overrides):
    fields = dict(
        id=7,
        ocid="ocds-9t57fa-000007",
        title="Network upgrade",
        department="Department of Health",
        category="Technology",
        province="Gauteng",
        value_min=Decimal("200000.00"),
        value_max=None,
        status="active",
        cidb_required="Grade 6",
        bbbee_required="Level 4",
        is_active=True,
    )
    fields.update(overrides)
    return Tender(**fields)


class TestConverters(unittest.TestCase):

    def test_profile_to_dto_converts_decimals(self):
        dto = profile_to_dto(make_profile_row())

        self.assertEqual(dto.user_id, "user-1")
        self.assertEqual(dto.preferred_value_min, 100000.0)
        self.assertIsInstance(dto.preferred_value_max, float)
        self.assertEqual(dto.industry_categories, ["Technology"])
        self.assertFalse(dto.sms_notifications)

    def test_profile_to_dto_handles_empty_arrays(self):
        dto = profile_to_dto(make_profile_row(industry_categories=None, provinces=None))

        self.assertEqual(dto.industry_categories, [])
        self.assertEqual(dto.provinces, [])

    def test_profile_with_inverted_range_is_rejected(self):
        row = make_profile_row(
            preferred_value_min=Decimal("900000"),
            preferred_value_max=Decimal("100000")
        )

        with self.assertRaises(InvalidProfileError):
            profile_to_dto(row)

    def test_tender_to_dto(self):
        dto = tender_to_dto(make_tender_row())

        self.assertEqual(dto.id, 7)
        self.assertEqual(dto.value_min, 200000.0)
        self.assertIsNone(dto.value_max)
        self.assertTrue(dto.is_active)

    def test_user_to_contact(self):
        user = User(id="user-1", email="owner@acme.co.za", first_name="Thandi", last_name="Nkosi")

        contact = user_to_contact(user)

        self.assertEqual(contact.email, "owner@acme.co.za")
        self.assertEqual(contact.display_name, "Thandi Nkosi")
        self.assertIsNone(contact.phone_number)

    def test_match_to_record(self):
        created_at = datetime(2024, 5, 1, tzinfo=timezone.utc)
        row = TenderMatch(
            id=3, user_id="user-1", tender_id=7, match_score=85,
            match_reasons=["Strong match"], is_viewed=True, created_at=created_at
        )

        record = match_to_record(row, created=False, previous_score=70)

        self.assertEqual(record.score, 85)
        self.assertTrue(record.is_viewed)
        self.assertFalse(record.created)
        self.assertEqual(record.previous_score, 70)
        self.assertEqual(record.created_at, created_at)


class TestSqlMatchingStore(unittest.TestCase):

    def setUp(self):
        self.repo = MagicMock()
        self.store = make_store(self.repo)

    def test_get_profile_missing(self):
        self.repo.profiles.get_by_user_id.return_value = None

        self.assertIsNone(self.store.get_profile("user-1"))

    def test_get_profile(self):
        self.repo.profiles.get_by_user_id.return_value = make_profile_row()

        profile = self.store.get_profile("user-1")

        self.assertEqual(profile.cidb_grading, "Grade 8")
        self.repo.profiles.get_by_user_id.assert_called_once_with("user-1")

    def test_list_profiled_user_ids(self):
        self.repo.profiles.list_user_ids.return_value = ["a", "b"]

        self.assertEqual(self.store.list_profiled_user_ids(), ["a", "b"])

    def test_get_active_tenders_passes_limit(self):
        store = make_store(self.repo, tender_limit=25)
        self.repo.tenders.get_active_tenders.return_value = [make_tender_row()]

        tenders = store.get_active_tenders()

        self.assertEqual([t.id for t in tenders], [7])
        self.repo.tenders.get_active_tenders.assert_called_once_with(limit=25)

    def test_upsert_match(self):
        row = TenderMatch(id=3, user_id="user-1", tender_id=7, match_score=90,
                          match_reasons=["Excellent match for your business"], is_viewed=False)
        self.repo.matches.upsert_match.return_value = (row, False, 60)

        record = self.store.upsert_match(MatchDTO(
            user_id="user-1", tender_id=7, score=90,
            reasons=["Excellent match for your business"]
        ))

        self.assertFalse(record.created)
        self.assertEqual(record.previous_score, 60)
        self.repo.matches.upsert_match.assert_called_once_with(
            user_id="user-1",
            tender_id=7,
            score=90,
            reasons=["Excellent match for your business"],
        )

    def test_get_user_missing(self):
        self.repo.users.get_by_id.return_value = None

        self.assertIsNone(self.store.get_user("ghost"))

    def test_create_notification(self):
        self.repo.notifications.create_notification.return_value = MagicMock(id=11)
        request = NotificationRequest(
            user_id="user-1",
            channel=CHANNEL_EMAIL,
            recipient="owner@acme.co.za",
            body="Body",
            subject="Subject",
            tender_id=7,
            metadata={'score': 90},
        )

        notification_id = self.store.create_notification(request)

        self.assertEqual(notification_id, 11)
        kwargs = self.repo.notifications.create_notification.call_args.kwargs
        self.assertEqual(kwargs['notification_type'], CHANNEL_EMAIL)
        self.assertEqual(kwargs['event_data'], {'score': 90})

    def test_update_notification_status(self):
        sent_at = datetime.now(timezone.utc)

        self.store.update_notification_status(11, 'sent', sent_at=sent_at)

        self.repo.notifications.update_status.assert_called_once_with(
            11, 'sent', sent_at=sent_at, error_message=None
        )

    def test_mark_match_viewed_missing_match(self):
        self.repo.matches.get_existing_match.return_value = None

        with self.assertRaises(MatchNotFoundException):
            self.store.mark_match_viewed("user-1", 7)
        self.repo.matches.mark_viewed.assert_not_called()

    def test_mark_match_viewed(self):
        self.repo.matches.get_existing_match.return_value = MagicMock()
        self.repo.matches.mark_viewed.return_value = True

        self.assertTrue(self.store.mark_match_viewed("user-1", 7))

    def test_get_user_matches(self):
        row = TenderMatch(id=3, user_id="user-1", tender_id=7, match_score=90, match_reasons=[])
        self.repo.matches.get_user_matches.return_value = [(row, make_tender_row())]

        records = self.store.get_user_matches("user-1")

        self.assertEqual([r.tender_id for r in records], [7])


if __name__ == '__main__':
    unittest.main()
