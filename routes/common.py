from functools import wraps

from flask import current_app, jsonify, request
from flask_jwt_extended import get_jwt, verify_jwt_in_request

from repositories import PageRequest
from services.errors import ErrorKind

ERROR_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.AUTHENTICATION_FAILURE: 401,
}

MOVIE_GENRE_MEDIA_TYPE = "application/vnd.dsmovie+json"


def failure_response(error):
    return jsonify({"message": error.message, "error": error.kind.value}), ERROR_STATUS[error.kind]


def validation_error_response(exc):
    errors = []
    for field, messages in (exc.messages or {}).items():
        if isinstance(messages, dict):
            messages = [str(m) for m in messages.values()]
        for message in messages:
            errors.append({"field": field, "msg": message})
    return jsonify({'message': 'Invalid input', 'errors': errors}), 400


def wants_genre_name():
    return MOVIE_GENRE_MEDIA_TYPE in request.headers.get("Accept", "")


def page_request_from_args():
    default_size = current_app.config["DEFAULT_PAGE_SIZE"]
    page = request.args.get("page", 0, type=int)
    size = request.args.get("size", default_size, type=int)
    return PageRequest(max(page, 0), size if size > 0 else default_size)


def role_required(*authorities):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            roles = set(get_jwt().get("roles", []))
            if not roles.intersection(authorities):
                return jsonify({"message": "Access denied"}), 403
            return fn(*args, **kwargs)

        return wrapper

    return decorator
