# price.py
# Client-facing discount preview. Display only: the price of record is
# always recomputed by enrollment.py when the user subscribes.
from decimal import ROUND_HALF_UP, Decimal

from flask import Blueprint, current_app, jsonify, request

from course_settings import PROMO_CODES
from enrollment_errors import StorageError
from recorder import CourseStore

price_bp = Blueprint("price", __name__)

# Upper-cased so lookups ignore the case the user typed.
_PREVIEW_RATES = {code.upper(): Decimal(rate) for code, rate in PROMO_CODES.items()}


def preview_discount(course, promo_input) -> dict:
    """Return ``{"applied": bool, "display_price": Decimal}`` for a typed code."""
    original = Decimal(str(course.price)).quantize(Decimal("0.01"))
    if original <= 0:
        return {"applied": False, "display_price": Decimal("0.00")}

    code = promo_input.strip().upper() if isinstance(promo_input, str) else ""
    rate = _PREVIEW_RATES.get(code)
    if rate is None:
        return {"applied": False, "display_price": original}
    return {
        "applied": True,
        "display_price": (original * rate).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
    }


@price_bp.route("/preview", methods=["GET", "POST"])   # <-- becomes /price/preview
def price_preview():
    body = request.get_json(silent=True) if request.is_json else None
    body = body if isinstance(body, dict) else {}
    course_id = str(request.values.get("course") or body.get("courseId") or body.get("course") or "").strip()
    code = request.values.get("code") or body.get("promoCode") or body.get("code")

    if not course_id:
        return jsonify({"error": "Course ID is required"}), 400

    try:
        course = CourseStore(current_app.config["DB_ENGINE"]).get(course_id)
    except StorageError as exc:
        return jsonify({"error": exc.message}), exc.status
    if course is None:
        return jsonify({"error": "Course not found"}), 404

    preview = preview_discount(course, code)
    return jsonify({
        "course_id": course.id,
        "base_price": float(course.price),
        "display_price": float(preview["display_price"]),
        "promo_applied": preview["applied"],
        "is_free": course.is_free,
        "advisory": True,
    }), 200
