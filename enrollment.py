"""Server-side enrollment: the authoritative subscribe operation.

Every check runs before the single write, so a rejected attempt leaves no
row behind. Collaborators are passed in explicitly:

* ``identity_resolver`` - ``resolve(token) -> Identity | None``
* ``course_store``      - ``get(course_id) -> Course | None``
* ``recorder``          - ``exists(user_id, course_id)`` and
  ``insert(user_id, course_id, price_paid) -> Subscription``
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from course_catalog import Subscription
from enrollment_errors import BadRequest, Conflict, NotFound, Unauthorized
from pricing import InvalidOrMissingPromo, evaluate_price

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrollmentResult:
    subscription: Subscription
    price_paid: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {"subscription": self.subscription.to_dict(), "pricePaid": float(self.price_paid)}


def _clean_course_id(course_id: Any) -> Optional[str]:
    if course_id is None or isinstance(course_id, bool):
        return None
    value = str(course_id).strip()
    return value or None


class EnrollmentService:
    def __init__(self, identity_resolver, course_store, recorder, case_sensitive_promo: bool = True):
        self.identity_resolver = identity_resolver
        self.course_store = course_store
        self.recorder = recorder
        self.case_sensitive_promo = case_sensitive_promo

    def authenticate(self, credential: Optional[str]):
        identity = self.identity_resolver.resolve(credential) if credential else None
        if identity is None or not getattr(identity, "id", None):
            raise Unauthorized()
        return identity

    def subscribe(self, credential: Optional[str], course_id: Any, promo_code: Any = None) -> EnrollmentResult:
        identity = self.authenticate(credential)

        cid = _clean_course_id(course_id)
        if cid is None:
            raise BadRequest("Course ID is required")

        course = self.course_store.get(cid)
        if course is None:
            raise NotFound("Course not found")

        if self.recorder.exists(identity.id, course.id):
            log.info("Rejected duplicate subscribe: user=%s course=%s", identity.id, course.id)
            raise Conflict("Already subscribed to this course")

        if promo_code is not None and not isinstance(promo_code, str):
            promo_code = str(promo_code)
        try:
            price_paid = evaluate_price(course.price, promo_code, case_sensitive=self.case_sensitive_promo)
        except InvalidOrMissingPromo as exc:
            log.info("Rejected subscribe for course=%s: %s", course.id, exc)
            if exc.missing:
                raise BadRequest("Promo code required for paid courses") from exc
            raise BadRequest("Invalid promo code") from exc

        subscription = self.recorder.insert(identity.id, course.id, price_paid)
        log.info(
            "Subscribed user=%s to course=%s price_paid=%s",
            identity.id, course.id, subscription.price_paid,
        )
        return EnrollmentResult(subscription=subscription, price_paid=subscription.price_paid)
