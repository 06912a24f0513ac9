"""Persistence for enrollments: course lookup and the subscription recorder."""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from course_catalog import Course, Subscription, to_money
from db import courses, subscriptions
from enrollment_errors import Conflict, StorageError

log = logging.getLogger(__name__)


class CourseStore:
    """Read-only course lookup by id."""

    def __init__(self, engine):
        self.engine = engine

    def get(self, course_id: str) -> Optional[Course]:
        stmt = select(courses).where(courses.c.id == course_id)
        try:
            with self.engine.connect() as conn:
                row = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as exc:
            log.exception("Course lookup failed for %s", course_id)
            raise StorageError("Failed to load course") from exc
        return Course.from_row(row) if row else None


class SubscriptionRecorder:
    """Writes a subscription row exactly once per (user, course)."""

    def __init__(self, engine):
        self.engine = engine

    def exists(self, user_id: str, course_id: str) -> bool:
        stmt = (
            select(subscriptions.c.id)
            .where(subscriptions.c.user_id == user_id)
            .where(subscriptions.c.course_id == course_id)
            .limit(1)
        )
        try:
            with self.engine.connect() as conn:
                return conn.execute(stmt).first() is not None
        except SQLAlchemyError as exc:
            log.exception("Subscription lookup failed for user=%s course=%s", user_id, course_id)
            raise StorageError("Failed to check existing subscription") from exc

    def insert(self, user_id: str, course_id: str, price_paid) -> Subscription:
        row = dict(
            id=str(uuid.uuid4()),
            user_id=user_id,
            course_id=course_id,
            price_paid=to_money(price_paid),
            subscribed_at=datetime.now(timezone.utc),
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(subscriptions.insert().values(**row))
        except IntegrityError as exc:
            # Lost the race against a concurrent subscribe for the same pair.
            log.warning("Duplicate subscription rejected by storage: user=%s course=%s", user_id, course_id)
            raise Conflict("Already subscribed to this course") from exc
        except SQLAlchemyError as exc:
            log.exception("Subscription insert failed for user=%s course=%s", user_id, course_id)
            raise StorageError("Failed to create subscription") from exc
        return Subscription.from_row(row)
