#!/usr/bin/env python3
"""Create the enrollment tables and seed the course catalog."""

from __future__ import annotations

import argparse
import json
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import select

from course_catalog import to_money
from db import courses, create_engine_with_fallback, ensure_schema

DEMO_COURSES: List[Dict[str, Any]] = [
    {
        "id": "demo-intro-prompting",
        "title": "Intro to Prompt Engineering",
        "description": "A short, free primer on writing prompts that behave.",
        "price": "0",
        "image_url": None,
    },
    {
        "id": "demo-llm-production",
        "title": "Shipping LLM Features to Production",
        "description": "Evaluation, rollout and monitoring for LLM-backed products.",
        "price": "40.00",
        "image_url": None,
    },
]


def _prepare_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create the courses/subscriptions tables and insert courses."
    )
    parser.add_argument(
        "-f",
        "--file",
        help="JSON file holding a list of {id, title, description, price, image_url} objects.",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Insert a small demo catalog with one free and one paid course.",
    )
    return parser.parse_args(argv)


def _normalize(raw: Dict[str, Any]) -> Dict[str, Any]:
    title = (raw.get("title") or "").strip()
    if not title:
        raise ValueError(f"course is missing a title: {raw!r}")
    price = to_money(raw.get("price"))
    if price < 0:
        raise ValueError(f"course {title!r} has a negative price")
    return {
        "id": str(raw.get("id") or uuid.uuid4()),
        "title": title,
        "description": raw.get("description") or "",
        "price": price,
        "image_url": raw.get("image_url") or None,
        "created_at": datetime.now(timezone.utc),
    }


def seed_courses(engine, rows: List[Dict[str, Any]]) -> int:
    """Insert courses whose id is not already present; return how many were added."""
    ensure_schema(engine)
    added = 0
    with engine.begin() as conn:
        for raw in rows:
            course = _normalize(raw)
            exists = conn.execute(select(courses.c.id).where(courses.c.id == course["id"])).first()
            if exists:
                print(f"Skipping {course['id']!r}: already present.", file=sys.stderr)
                continue
            conn.execute(courses.insert().values(**course))
            print(f"Added {course['title']!r} ({course['id']}) at {course['price']}.")
            added += 1
    return added


def main(argv: List[str] | None = None) -> int:
    args = _prepare_args(argv)
    rows: List[Dict[str, Any]] = []
    if args.file:
        with open(args.file, "r", encoding="utf-8") as handle:
            loaded = json.load(handle)
        if not isinstance(loaded, list):
            print("Course file must contain a JSON list.", file=sys.stderr)
            return 2
        rows.extend(loaded)
    if args.demo:
        rows.extend(DEMO_COURSES)
    if not rows:
        print("Nothing to seed: pass --file and/or --demo.", file=sys.stderr)
        return 1

    engine = create_engine_with_fallback()
    added = seed_courses(engine, rows)
    print(f"Seeded {added} course(s).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
