from flask import Blueprint, jsonify, request
from marshmallow import ValidationError

from routes.common import (
    failure_response,
    page_request_from_args,
    role_required,
    validation_error_response,
    wants_genre_name,
)
from repositories import GenreRepository
from schemas import genre_schema, movie_schema
from services.movie_service import MovieService
from services.user_service import ADMIN_ROLE

movie_bp = Blueprint("movie_api", __name__)

movie_service = MovieService()
genre_repository = GenreRepository()


@movie_bp.route("/movies", methods=["GET"])
def find_all():
    title = request.args.get("title", "")
    page_request = page_request_from_args()
    if wants_genre_name():
        result = movie_service.search_with_genre(title, page_request)
    else:
        result = movie_service.search(title, page_request)
    return jsonify(result.value)


@movie_bp.route("/movies/<int:movie_id>", methods=["GET"])
def find_by_id(movie_id: int):
    if wants_genre_name():
        result = movie_service.find_by_id_with_genre(movie_id)
    else:
        result = movie_service.find_by_id(movie_id)
    if not result.ok:
        return failure_response(result.error)
    return jsonify(result.value)


@movie_bp.route("/movies", methods=["POST"])
@role_required(ADMIN_ROLE)
def insert():
    try:
        payload = movie_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)

    result = movie_service.insert(payload)
    if not result.ok:
        return failure_response(result.error)
    response = jsonify(result.value)
    response.status_code = 201
    response.headers["Location"] = f"/movies/{result.value['id']}"
    return response


@movie_bp.route("/movies/<int:movie_id>", methods=["PUT"])
@role_required(ADMIN_ROLE)
def update(movie_id: int):
    try:
        payload = movie_schema.load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)

    result = movie_service.update(movie_id, payload)
    if not result.ok:
        return failure_response(result.error)
    return jsonify(result.value)


@movie_bp.route("/movies/<int:movie_id>", methods=["DELETE"])
@role_required(ADMIN_ROLE)
def delete(movie_id: int):
    result = movie_service.delete(movie_id)
    if not result.ok:
        return failure_response(result.error)
    return "", 204


@movie_bp.route("/genres", methods=["GET"])
def list_genres():
    genres = genre_repository.find_all()
    return jsonify({"genres": genre_schema.dump(genres, many=True)})
