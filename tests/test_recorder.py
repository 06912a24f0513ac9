import unittest
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool

from db import courses, ensure_schema, subscriptions
from enrollment_errors import Conflict, StorageError
from recorder import CourseStore, SubscriptionRecorder


def _memory_engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        future=True,
    )
    ensure_schema(engine)
    return engine


class RecorderTests(unittest.TestCase):
    def setUp(self):
        self.engine = _memory_engine()
        with self.engine.begin() as conn:
            conn.execute(courses.insert().values(
                id="c-paid",
                title="Paid course",
                description="",
                price=Decimal("40.00"),
                created_at=datetime.now(timezone.utc),
            ))
        self.recorder = SubscriptionRecorder(self.engine)

    def _count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(subscriptions)).scalar_one()

    def test_insert_returns_generated_fields(self):
        sub = self.recorder.insert("u-1", "c-paid", Decimal("20.00"))
        self.assertTrue(sub.id)
        self.assertEqual(sub.user_id, "u-1")
        self.assertEqual(sub.course_id, "c-paid")
        self.assertEqual(sub.price_paid, Decimal("20.00"))
        self.assertIsNotNone(sub.subscribed_at)
        self.assertTrue(self.recorder.exists("u-1", "c-paid"))
        self.assertEqual(self._count(), 1)

    def test_exists_is_scoped_to_the_pair(self):
        self.recorder.insert("u-1", "c-paid", Decimal("20.00"))
        self.assertFalse(self.recorder.exists("u-2", "c-paid"))
        self.assertFalse(self.recorder.exists("u-1", "c-other"))

    def test_unique_constraint_maps_to_conflict(self):
        self.recorder.insert("u-1", "c-paid", Decimal("20.00"))
        with self.assertRaises(Conflict):
            self.recorder.insert("u-1", "c-paid", Decimal("20.00"))
        self.assertEqual(self._count(), 1)

    def test_write_failure_maps_to_storage_error(self):
        boom = OperationalError("INSERT", {}, Exception("database is locked"))
        broken = MagicMock()
        broken.begin.side_effect = boom
        with self.assertRaises(StorageError):
            SubscriptionRecorder(broken).insert("u-1", "c-paid", Decimal("20.00"))
        self.assertEqual(self._count(), 0)


class CourseStoreTests(unittest.TestCase):
    def setUp(self):
        self.engine = _memory_engine()
        with self.engine.begin() as conn:
            conn.execute(courses.insert().values(
                id="c-free",
                title="Free course",
                description="No charge",
                price=Decimal("0"),
                image_url="https://example.com/free.png",
                created_at=datetime.now(timezone.utc),
            ))
        self.store = CourseStore(self.engine)

    def test_get_existing(self):
        course = self.store.get("c-free")
        self.assertEqual(course.title, "Free course")
        self.assertTrue(course.is_free)
        self.assertEqual(course.image_url, "https://example.com/free.png")

    def test_get_missing(self):
        self.assertIsNone(self.store.get("nope"))

    def test_read_failure_maps_to_storage_error(self):
        boom = OperationalError("SELECT", {}, Exception("connection refused"))
        broken = MagicMock()
        broken.connect.side_effect = boom
        with self.assertRaises(StorageError):
            CourseStore(broken).get("c-free")


if __name__ == "__main__":
    unittest.main()
