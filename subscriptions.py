"""Subscription (enrollment) endpoints."""

import logging
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request
from flask_cors import CORS

from course_settings import CORS_HEADERS, CORS_METHODS, CORS_ORIGINS, PROMO_CODE_CASE_SENSITIVE
from enrollment import EnrollmentService
from enrollment_errors import EnrollmentError
from identity import bearer_token
from recorder import CourseStore, SubscriptionRecorder

log = logging.getLogger("enrollment-subscriptions")

subscription_bp = Blueprint("subscription", __name__, url_prefix="/subscribe")


def configure_cors(app) -> None:
    """Open the enrollment endpoints to any origin, preflight included."""
    CORS(
        app,
        resources={r"/subscribe*": {"origins": CORS_ORIGINS}, r"/price/*": {"origins": CORS_ORIGINS}},
        methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        send_wildcard=True,
    )


def _enrollment_service() -> EnrollmentService:
    service = current_app.config.get("ENROLLMENT_SERVICE")
    if service is not None:
        return service
    engine = current_app.config.get("DB_ENGINE")
    resolver = current_app.config.get("IDENTITY_RESOLVER")
    if engine is None or resolver is None:
        raise RuntimeError("DB_ENGINE and IDENTITY_RESOLVER must be configured")
    return EnrollmentService(
        identity_resolver=resolver,
        course_store=CourseStore(engine),
        recorder=SubscriptionRecorder(engine),
        case_sensitive_promo=current_app.config.get("PROMO_CODE_CASE_SENSITIVE", PROMO_CODE_CASE_SENSITIVE),
    )


def _error(exc: EnrollmentError):
    return jsonify({"error": exc.message}), exc.status


@subscription_bp.post("/")
def create_subscription():
    """Validate and record an enrollment for the bearer of the request."""
    credential = bearer_token(request.headers.get("Authorization"))
    payload: Dict[str, Any] = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        payload = {}

    try:
        result = _enrollment_service().subscribe(
            credential,
            payload.get("courseId"),
            payload.get("promoCode"),
        )
    except EnrollmentError as exc:
        if exc.status >= 500:
            log.error("Subscribe failed: %s", exc.message)
        else:
            log.info("Subscribe rejected (%s): %s", exc.status, exc.message)
        return _error(exc)
    except Exception:
        log.exception("Unexpected error while subscribing")
        return jsonify({"error": "Failed to create subscription"}), 500

    return jsonify(result.to_dict()), 200


@subscription_bp.get("/<course_id>")
def subscription_status(course_id: str):
    """Tell the caller whether they already hold a subscription to ``course_id``."""
    credential = bearer_token(request.headers.get("Authorization"))
    try:
        service = _enrollment_service()
        identity = service.authenticate(credential)
        subscribed = service.recorder.exists(identity.id, course_id)
    except EnrollmentError as exc:
        return _error(exc)
    except Exception:
        log.exception("Unexpected error while checking subscription")
        return jsonify({"error": "Failed to check subscription"}), 500
    return jsonify({"course_id": course_id, "subscribed": subscribed}), 200
