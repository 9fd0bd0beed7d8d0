from flask import Blueprint, jsonify
from flask_jwt_extended import get_jwt_identity, jwt_required

from routes.common import failure_response
from schemas import user_schema
from services.user_service import UserService

user_bp = Blueprint("user_api", __name__)

user_service = UserService()


@user_bp.route("/users/me", methods=["GET"])
@jwt_required()
def me():
    result = user_service.current_user(get_jwt_identity())
    if not result.ok:
        return failure_response(result.error)
    return jsonify(user_schema.dump(result.value))
