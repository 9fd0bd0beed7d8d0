"""Data access for the DSMovie entities.

Repositories own the Flask-SQLAlchemy session work: every save commits, and
rolls the session back before re-raising when the database refuses it.
Absence and integrity problems surface as SQLAlchemy exceptions
(``NoResultFound``, ``IntegrityError``) for the services to translate.
"""
import math
from collections import namedtuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import NoResultFound

from models import Genre, Movie, Role, User, db, user_role

PageRequest = namedtuple("PageRequest", ["page", "size"])

UserDetailsProjection = namedtuple(
    "UserDetailsProjection", ["username", "password", "role_id", "authority"]
)


class Page:
    """A slice of an ordered result set; ``page`` is 0-based."""

    def __init__(self, content, total, page, size):
        self.content = list(content)
        self.total = total
        self.page = page
        self.size = size

    @property
    def total_pages(self):
        if self.size <= 0:
            return 0
        return math.ceil(self.total / self.size)

    @property
    def first(self):
        return self.page == 0

    @property
    def last(self):
        return self.page + 1 >= self.total_pages

    @property
    def empty(self):
        return not self.content

    def map(self, fn):
        return Page([fn(item) for item in self.content], self.total, self.page, self.size)


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


class MovieRepository:

    def find_by_id(self, movie_id):
        return db.session.get(Movie, movie_id)

    def search_by_title(self, title, page_request):
        query = Movie.query
        if title:
            query = query.filter(Movie.title.icontains(title, autoescape=True))
        pagination = query.order_by(Movie.id.asc()).paginate(
            page=page_request.page + 1,
            per_page=page_request.size,
            error_out=False,
        )
        return Page(pagination.items, pagination.total or 0, page_request.page, page_request.size)

    def get_reference_by_id(self, movie_id):
        # raises NoResultFound when the id does not exist
        return Movie.query.filter_by(id=movie_id).one()

    def exists_by_id(self, movie_id):
        return db.session.query(Movie.query.filter_by(id=movie_id).exists()).scalar()

    def save(self, movie):
        db.session.add(movie)
        _commit()
        return movie

    def delete_by_id(self, movie_id):
        movie = db.session.get(Movie, movie_id)
        if movie is None:
            raise NoResultFound(f"Movie {movie_id} not found")
        db.session.delete(movie)
        _commit()


class UserRepository:

    def find_by_username(self, username):
        return User.query.filter_by(username=username).first()

    def search_user_and_roles_by_username(self, username):
        rows = (
            db.session.query(User.username, User.password, Role.id, Role.authority)
            .join(user_role, user_role.c.user_id == User.id)
            .join(Role, Role.id == user_role.c.role_id)
            .filter(User.username == username)
            .all()
        )
        return [UserDetailsProjection(*row) for row in rows]

    def save(self, user):
        db.session.add(user)
        _commit()
        return user


class RoleRepository:

    def find_by_authority(self, authority):
        return Role.query.filter_by(authority=authority).first()

    def ensure(self, authorities):
        for authority in authorities:
            if self.find_by_authority(authority) is None:
                db.session.add(Role(authority=authority))
        _commit()


class ScoreRepository:

    def add(self, score):
        # staged only; committed with the movie it belongs to
        db.session.add(score)
        return score


class GenreRepository:

    def find_all(self):
        return Genre.query.order_by(Genre.id.asc()).all()
