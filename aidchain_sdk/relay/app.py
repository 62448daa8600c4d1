"""
HTTP interface of the sponsor relay.

Endpoints:
    POST /api/sponsor  {network, transactionKindBytes, sender, allowedMoveCallTargets}
    POST /api/execute  {digest, signature}; 504 when the outcome is unknown
    GET  /health
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS
from pydantic import ValidationError as PydanticValidationError
from werkzeug.exceptions import HTTPException

from ..config import RelaySettings
from ..exceptions import AmbiguousStatus, ProtocolViolation, RelayRequestError, UpstreamError
from ..models import SponsorshipRequest
from ..utils import sanitize_for_logging
from ..version import __version__
from .enoki import EnokiClient
from .service import ExecutionRelay, SponsorProvider, SponsorRelay

logger = logging.getLogger(__name__)

relay_bp = Blueprint("relay", __name__)

EXTENSION_KEY = "aidchain_relay"


def error_response(message: str, status: int, details: Optional[list] = None) -> Tuple[Any, int]:
    body: Dict[str, Any] = {"error": message}
    if status >= 500:
        body["details"] = details or []
    return jsonify(body), status


def _services() -> Dict[str, Any]:
    return current_app.extensions[EXTENSION_KEY]


def _json_body() -> Optional[Dict[str, Any]]:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else None


@relay_bp.route("/health", methods=["GET"])
def health() -> Tuple[Any, int]:
    """Liveness probe."""
    return jsonify({
        "status": "ok",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }), 200


@relay_bp.route("/api/sponsor", methods=["POST"])
def sponsor() -> Tuple[Any, int]:
    body = _json_body()
    if body is None:
        return error_response("Request body must be a JSON object", 400)
    logger.debug(f"Sponsor request: {sanitize_for_logging(body, ['transactionKindBytes'])}")

    try:
        sponsorship = SponsorshipRequest.model_validate(body)
    except PydanticValidationError as e:
        return error_response(f"Invalid request: {e.errors()[0]['msg']}", 400)

    try:
        grant = _services()["sponsor"].create_grant(sponsorship)
    except RelayRequestError as e:
        return error_response(str(e), 400)
    except UpstreamError as e:
        return error_response(str(e), 500, e.details)

    return jsonify({"bytes": grant.tx_bytes, "digest": grant.digest}), 200


@relay_bp.route("/api/execute", methods=["POST"])
def execute() -> Tuple[Any, int]:
    body = _json_body()
    if body is None:
        return error_response("Request body must be a JSON object", 400)
    logger.debug(f"Execute request: {sanitize_for_logging(body, ['signature'])}")

    digest = body.get("digest")
    signature = body.get("signature")
    if not isinstance(digest, (str, type(None))) or not isinstance(signature, (str, type(None))):
        return error_response("digest and signature must be strings", 400)

    try:
        final_digest = _services()["execute"].execute(digest, signature)
    except RelayRequestError as e:
        return error_response(str(e), 400)
    except UpstreamError as e:
        return error_response(str(e), 500, e.details)
    except AmbiguousStatus as e:
        # The grant may have executed
        return error_response(str(e), 504)
    except ProtocolViolation as e:
        return error_response(str(e), 500)

    return jsonify({"digest": final_digest}), 200


def create_app(
    settings: Optional[RelaySettings] = None,
    provider: Optional[SponsorProvider] = None
) -> Flask:
    """
    Create the relay application.

    Args:
        settings: Relay settings; read from the environment when omitted
        provider: Upstream provider; an EnokiClient built from settings when omitted

    Raises:
        ConfigurationError: If settings are read from an environment without
            ENOKI_PRIVATE_KEY
    """
    settings = settings or RelaySettings.from_env()
    if provider is None:
        provider = EnokiClient(
            api_key=settings.enoki_api_key,
            base_url=settings.enoki_api_url,
            timeout=settings.upstream_timeout,
        )

    app = Flask(__name__)
    CORS(app, origins=list(settings.cors_origins))
    app.extensions[EXTENSION_KEY] = {
        "sponsor": SponsorRelay(provider, allow_wildcard=settings.allow_wildcard),
        "execute": ExecutionRelay(provider),
    }
    app.register_blueprint(relay_bp)

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        if isinstance(error, HTTPException):
            return error_response(error.description, error.code)
        logger.exception("Unhandled relay error")
        return error_response("Internal server error", 500)

    if settings.allow_wildcard:
        logger.warning("Wildcard allow-lists are enabled; use only for demo deployments")
    return app
