import unittest
from decimal import Decimal

from sqlalchemy import create_engine, select
from sqlalchemy.pool import StaticPool

import seed_courses
from db import courses


class SeedCoursesTests(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            future=True,
        )

    def test_demo_catalog_is_idempotent(self):
        self.assertEqual(seed_courses.seed_courses(self.engine, seed_courses.DEMO_COURSES), 2)
        self.assertEqual(seed_courses.seed_courses(self.engine, seed_courses.DEMO_COURSES), 0)
        with self.engine.connect() as conn:
            prices = dict(conn.execute(select(courses.c.id, courses.c.price)).all())
        self.assertEqual(prices["demo-intro-prompting"], Decimal("0"))
        self.assertEqual(prices["demo-llm-production"], Decimal("40.00"))

    def test_rejects_bad_rows(self):
        with self.assertRaises(ValueError):
            seed_courses.seed_courses(self.engine, [{"title": "", "price": "10"}])
        with self.assertRaises(ValueError):
            seed_courses.seed_courses(self.engine, [{"title": "Refund", "price": "-5"}])

    def test_main_requires_input(self):
        self.assertEqual(seed_courses.main([]), 1)


if __name__ == "__main__":
    unittest.main()
