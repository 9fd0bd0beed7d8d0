import json

import pytest
from sqlalchemy.exc import IntegrityError

from app import app, db
from models import Genre, Movie, Role, Score, User
from repositories import MovieRepository
from security import hash_password
from services.score_service import ScoreService

ADMIN = {"username": "maria@gmail.com", "password": "Admin123!"}
CLIENT = {"username": "alex@gmail.com", "password": "Client123!"}
MEDIA_TYPE = "application/vnd.dsmovie+json"


def create_user(username, password, authority):
    user = User(username=username, password=hash_password(password))
    user.roles.append(Role.query.filter_by(authority=authority).first())
    db.session.add(user)
    db.session.commit()
    return user.id


def login(client, credentials):
    response = client.post("/login", data=json.dumps(credentials), content_type="application/json")
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.get_json()['token']}"}


def movie_payload(**overrides):
    payload = {
        "title": "Spider-Man: No Way Home",
        "score": 0,
        "count": 0,
        "image": "https://image.tmdb.org/t/p/w500/1g0dhYtq4irTY1GPXvft6k4YLjm.jpg",
        "genre_id": 1,
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def catalog(client):
    action = Genre(name="Action")
    drama = Genre(name="Drama")
    db.session.add_all([action, drama])
    db.session.flush()
    movies = [
        Movie(title="The Witcher", score=4.5, count=2, image="https://img.example.com/witcher.jpg", genre=action),
        Movie(title="Venom: Let There Be Carnage", score=3.333, count=3, image="https://img.example.com/venom.jpg", genre=action),
        Movie(title="The Whale", score=0, count=0, image="https://img.example.com/whale.jpg", genre=drama),
    ]
    db.session.add_all(movies)
    db.session.commit()
    create_user(ADMIN["username"], ADMIN["password"], "ROLE_ADMIN")
    create_user(CLIENT["username"], CLIENT["password"], "ROLE_CLIENT")
    return {movie.title: movie.id for movie in movies}


# valid registration test
def test_register_creates_client_user(client):
    payload = {"username": "new_user@gmail.com", "password": "Secret123!"}
    response = client.post("/register", data=json.dumps(payload), content_type="application/json")
    assert response.status_code == 201
    assert response.get_json()["user"]["roles"] == ["ROLE_CLIENT"]
    assert User.query.filter_by(username="new_user@gmail.com").count() == 1


#duplicate registration test
def test_duplicate_register_returns_conflict(client):
    payload = {"username": "dup_user@gmail.com", "password": "Secret123!"}
    client.post("/register", data=json.dumps(payload), content_type="application/json")
    response = client.post("/register", data=json.dumps(payload), content_type="application/json")
    assert response.status_code == 409
    assert response.get_json()["message"] == "User already exists"


#invalid registration tests
def test_register_validation_errors(client):
    payload = {"username": "ab", "password": "123"}
    response = client.post("/register", data=json.dumps(payload), content_type="application/json")
    assert response.status_code == 400
    body = response.get_json()
    assert body["message"] == "Invalid input"
    username_errors = [error["msg"] for error in body["errors"] if error["field"] == "username"]
    password_errors = [error["msg"] for error in body["errors"] if error["field"] == "password"]
    assert "Username must be a valid email" in username_errors
    assert "Password must be at least 8 characters" in password_errors


# VALID LOGIN
def test_login_with_valid_credentials(client, catalog):
    response = client.post("/login", data=json.dumps(ADMIN), content_type="application/json")
    assert response.status_code == 200
    body = response.get_json()
    assert "token" in body
    assert body["roles"] == ["ROLE_ADMIN"]


def test_login_unknown_user(client, catalog):
    payload = {"username": "victor@gmail.com", "password": "Whatever1!"}
    response = client.post("/login", data=json.dumps(payload), content_type="application/json")
    assert response.status_code == 401
    assert response.get_json()["message"] == "User not found"


def test_login_wrong_password(client, catalog):
    payload = {"username": CLIENT["username"], "password": "Wrong123!"}
    response = client.post("/login", data=json.dumps(payload), content_type="application/json")
    assert response.status_code == 401
    assert response.get_json()["message"] == "Invalid password"


def test_current_user_endpoint(client, catalog):
    headers = login(client, CLIENT)
    response = client.get("/users/me", headers=headers)
    assert response.status_code == 200
    assert response.get_json()["username"] == CLIENT["username"]
    assert response.get_json()["roles"] == ["ROLE_CLIENT"]


def test_current_user_requires_token(client, catalog):
    response = app.test_client().get("/users/me")
    assert response.status_code == 401


def test_search_movies_by_title_ignores_case(client, catalog):
    response = client.get("/movies?title=WITCH")
    assert response.status_code == 200
    body = response.get_json()
    assert body["total_elements"] == 1
    assert body["content"][0]["title"] == "The Witcher"
    assert body["content"][0]["genre_id"] == 1


def test_search_movies_is_paginated(client, catalog):
    response = client.get("/movies?page=1&size=2")
    body = response.get_json()
    assert body["total_elements"] == 3
    assert body["total_pages"] == 2
    assert body["number"] == 1
    assert body["number_of_elements"] == 1
    assert body["last"] is True


def test_search_movies_with_genre_name(client, catalog):
    response = client.get("/movies?title=venom", headers={"Accept": MEDIA_TYPE})
    movie = response.get_json()["content"][0]
    assert movie["genre"] == "Action"
    assert movie["score"] == 3.33


def test_find_movie_by_id(client, catalog):
    movie_id = catalog["The Whale"]
    response = client.get(f"/movies/{movie_id}")
    assert response.status_code == 200
    assert response.get_json()["id"] == movie_id


def test_find_movie_by_missing_id(client, catalog):
    response = client.get("/movies/999")
    assert response.status_code == 404
    assert response.get_json()["error"] == "not_found"


def test_insert_movie_as_admin(client, catalog):
    headers = login(client, ADMIN)
    response = client.post("/movies", data=json.dumps(movie_payload()), content_type="application/json", headers=headers)
    assert response.status_code == 201
    body = response.get_json()
    assert body["id"] is not None
    assert body["title"] == "Spider-Man: No Way Home"
    assert response.headers["Location"] == f"/movies/{body['id']}"


def test_insert_movie_with_unknown_genre_is_conflict(client, catalog):
    headers = login(client, ADMIN)
    response = client.post(
        "/movies", data=json.dumps(movie_payload(genre_id=999)), content_type="application/json", headers=headers
    )
    assert response.status_code == 409


def test_insert_movie_validation_errors(client, catalog):
    headers = login(client, ADMIN)
    payload = movie_payload(title="abc", image="nope")
    response = client.post("/movies", data=json.dumps(payload), content_type="application/json", headers=headers)
    assert response.status_code == 400
    fields = {error["field"] for error in response.get_json()["errors"]}
    assert fields == {"title", "image"}


def test_insert_movie_requires_admin(client, catalog):
    headers = login(client, CLIENT)
    response = client.post("/movies", data=json.dumps(movie_payload()), content_type="application/json", headers=headers)
    assert response.status_code == 403


def test_insert_movie_requires_token(client, catalog):
    response = app.test_client().post("/movies", data=json.dumps(movie_payload()), content_type="application/json")
    assert response.status_code == 401


def test_update_movie(client, catalog):
    headers = login(client, ADMIN)
    movie_id = catalog["The Whale"]
    payload = movie_payload(title="The Whale (2022)", genre_id=2, count=1, score=2.5)
    response = client.put(f"/movies/{movie_id}", data=json.dumps(payload), content_type="application/json", headers=headers)
    assert response.status_code == 200
    assert response.get_json()["title"] == "The Whale (2022)"
    assert db.session.get(Movie, movie_id).title == "The Whale (2022)"


def test_update_missing_movie(client, catalog):
    headers = login(client, ADMIN)
    response = client.put("/movies/999", data=json.dumps(movie_payload()), content_type="application/json", headers=headers)
    assert response.status_code == 404


def test_delete_movie(client, catalog):
    headers = login(client, ADMIN)
    movie_id = catalog["The Whale"]
    response = client.delete(f"/movies/{movie_id}", headers=headers)
    assert response.status_code == 204
    assert client.get(f"/movies/{movie_id}").status_code == 404
    assert client.delete(f"/movies/{movie_id}", headers=headers).status_code == 404


def test_delete_scored_movie_is_conflict(client, catalog):
    movie_id = catalog["The Witcher"]
    user = User.query.filter_by(username=CLIENT["username"]).first()
    db.session.add(Score(movie_id=movie_id, user_id=user.id, value=5.0))
    db.session.commit()

    headers = login(client, ADMIN)
    response = client.delete(f"/movies/{movie_id}", headers=headers)
    assert response.status_code == 409
    assert response.get_json()["message"] == "Integrity violation"
    assert db.session.get(Movie, movie_id) is not None


def test_save_score_updates_average(client, catalog):
    movie_id = catalog["The Whale"]

    client_headers = login(client, CLIENT)
    response = client.put(
        "/scores", data=json.dumps({"movie_id": movie_id, "score": 4}), content_type="application/json", headers=client_headers
    )
    assert response.status_code == 200
    assert response.get_json()["score"] == 4.0
    assert response.get_json()["count"] == 1

    admin_headers = login(client, ADMIN)
    response = client.put(
        "/scores", data=json.dumps({"movie_id": movie_id, "score": 5}), content_type="application/json", headers=admin_headers
    )
    assert response.get_json()["score"] == 4.5
    assert response.get_json()["count"] == 2

    response = client.put(
        "/scores", data=json.dumps({"movie_id": movie_id, "score": 2}), content_type="application/json", headers=client_headers
    )
    assert response.get_json()["score"] == 3.5
    assert response.get_json()["count"] == 2


def test_save_score_for_missing_movie(client, catalog):
    headers = login(client, CLIENT)
    response = client.put(
        "/scores", data=json.dumps({"movie_id": 999, "score": 4}), content_type="application/json", headers=headers
    )
    assert response.status_code == 404


def test_list_genres(client, catalog):
    response = client.get("/genres")
    assert [genre["name"] for genre in response.get_json()["genres"]] == ["Action", "Drama"]


def test_register_and_login_with_longest_password(client):
    payload = {"username": "long_pass@gmail.com", "password": "A1!" + "a" * 61}
    response = client.post("/register", data=json.dumps(payload), content_type="application/json")
    assert response.status_code == 201

    response = client.post("/login", data=json.dumps(payload), content_type="application/json")
    assert response.status_code == 200
    assert "token" in response.get_json()


def test_update_movie_with_unknown_genre_is_conflict(client, catalog):
    headers = login(client, ADMIN)
    movie_id = catalog["The Whale"]
    response = client.put(
        f"/movies/{movie_id}", data=json.dumps(movie_payload(genre_id=999)), content_type="application/json", headers=headers
    )
    assert response.status_code == 409
    assert db.session.get(Movie, movie_id).genre_id == 2


def test_search_treats_wildcards_literally(client, catalog):
    response = client.get("/movies?title=%25")
    assert response.get_json()["total_elements"] == 0

    response = client.get("/movies?title=Th_")
    assert response.get_json()["total_elements"] == 0


class RejectingMovieRepository(MovieRepository):
    def save(self, movie):
        db.session.rollback()
        raise IntegrityError("UPDATE tb_movie", {}, Exception("constraint failed"))


def test_score_is_not_kept_when_movie_update_fails(client, catalog):
    movie_id = catalog["The Whale"]
    service = ScoreService(movie_repository=RejectingMovieRepository())

    result = service.save_score(CLIENT["username"], movie_id, 4.0)

    assert result.error.message == "Integrity violation"
    assert Score.query.filter_by(movie_id=movie_id).count() == 0
    assert db.session.get(Movie, movie_id).count == 0
