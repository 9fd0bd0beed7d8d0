from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity
from marshmallow import ValidationError

from routes.common import failure_response, role_required, validation_error_response
from schemas import score_schema
from services.score_service import ScoreService
from services.user_service import ADMIN_ROLE, CLIENT_ROLE

score_bp = Blueprint("score_api", __name__)

score_service = ScoreService()


@score_bp.route("/scores", methods=["PUT"])
@role_required(CLIENT_ROLE, ADMIN_ROLE)
def save_score():
    try:
        payload = score_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)

    result = score_service.save_score(get_jwt_identity(), payload["movie_id"], payload["score"])
    if not result.ok:
        return failure_response(result.error)
    return jsonify(result.value)
