"""Course and subscription records shared by the pricing and enrollment code.

Rows come back from SQLAlchemy as mappings; the helpers here turn them into
frozen dataclasses and back into JSON-friendly dicts.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Mapping, Optional

CENTS = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Coerce a stored or user-supplied amount into a two-place Decimal."""
    if isinstance(value, Decimal):
        amount = value
    elif value is None:
        amount = Decimal("0")
    else:
        amount = Decimal(str(value))
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def _iso(value: Any) -> Optional[str]:
    if value is None:
        return None
    try:
        return value.isoformat()  # type: ignore[attr-defined]
    except Exception:
        return str(value)


@dataclass(frozen=True)
class Course:
    """A catalog entry. Read-only from the enrollment side."""

    id: str
    title: str
    description: str
    price: Decimal
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_free(self) -> bool:
        return self.price == 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Course":
        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            description=row.get("description") or "",
            price=to_money(row.get("price")),
            image_url=row.get("image_url") or None,
            created_at=row.get("created_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "price": float(self.price),
            "image_url": self.image_url,
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class Subscription:
    """A user's enrollment in one course, with the price actually paid."""

    id: str
    user_id: str
    course_id: str
    price_paid: Decimal
    subscribed_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Subscription":
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            course_id=str(row["course_id"]),
            price_paid=to_money(row.get("price_paid")),
            subscribed_at=row.get("subscribed_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "course_id": self.course_id,
            "price_paid": float(self.price_paid),
            "subscribed_at": _iso(self.subscribed_at),
        }


__all__ = ["CENTS", "Course", "Subscription", "to_money"]
