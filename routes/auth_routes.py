from flask import Blueprint, jsonify, request
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies
from marshmallow import ValidationError

from routes.common import failure_response, validation_error_response
from schemas import login_schema, register_schema, user_schema
from services.user_service import UserService

auth_bp = Blueprint("auth", __name__)

user_service = UserService()


@auth_bp.route("/register", methods=["POST"])
def register():
    try:
        payload = register_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)

    result = user_service.register(payload["username"], payload["password"])
    if not result.ok:
        return failure_response(result.error)

    return jsonify({'message': 'User registered successfully', 'user': user_schema.dump(result.value)}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    try:
        payload = login_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)

    result = user_service.authenticate(payload["username"], payload["password"])
    if not result.ok:
        response, status = failure_response(result.error)
        unset_jwt_cookies(response)
        return response, status

    detail = result.value
    token = create_access_token(identity=detail.username, additional_claims={"roles": sorted(detail.roles)})
    response = jsonify({'message': 'Successful login', 'token': token, 'roles': sorted(detail.roles)})
    set_access_cookies(response, token)
    return response


@auth_bp.route("/logout", methods=["POST"])
def logout():
    response = jsonify({'message': 'Logged out'})
    unset_jwt_cookies(response)
    return response
