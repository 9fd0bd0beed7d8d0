import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import NoResultFound

from models import Movie
from repositories import MovieRepository
from schemas import dump_page, movie_genre_schema, movie_schema
from services.errors import Result

logger = logging.getLogger(__name__)


def copy_to_entity(data, movie):
    movie.title = data["title"]
    movie.score = data.get("score", 0.0)
    movie.count = data.get("count", 0)
    movie.image = data["image"]
    movie.genre_id = data["genre_id"]


class MovieService:
    """Movie CRUD over a MovieRepository.

    Every operation returns a ``Result``; store exceptions are translated to
    NOT_FOUND or CONFLICT before leaving this class.
    """

    def __init__(self, repository=None):
        self.repository = repository or MovieRepository()

    def search(self, title, page_request, schema=movie_schema):
        page = self.repository.search_by_title(title, page_request)
        return Result.success(dump_page(page, schema))

    def search_with_genre(self, title, page_request):
        return self.search(title, page_request, schema=movie_genre_schema)

    def find_by_id(self, movie_id, schema=movie_schema):
        movie = self.repository.find_by_id(movie_id)
        if movie is None:
            return Result.not_found()
        return Result.success(schema.dump(movie))

    def find_by_id_with_genre(self, movie_id):
        return self.find_by_id(movie_id, schema=movie_genre_schema)

    def insert(self, data):
        movie = Movie()
        copy_to_entity(data, movie)
        try:
            movie = self.repository.save(movie)
        except IntegrityError as exc:
            logger.warning("Insert of movie %r rejected: %s", data.get("title"), exc.orig)
            return Result.conflict()
        logger.info("Movie %s created", movie.id)
        return Result.success(movie_schema.dump(movie))

    def update(self, movie_id, data):
        try:
            movie = self.repository.get_reference_by_id(movie_id)
            copy_to_entity(data, movie)
            movie = self.repository.save(movie)
        except NoResultFound:
            return Result.not_found()
        except IntegrityError as exc:
            logger.warning("Update of movie %s rejected: %s", movie_id, exc.orig)
            return Result.conflict()
        logger.info("Movie %s updated", movie_id)
        return Result.success(movie_schema.dump(movie))

    def delete(self, movie_id):
        if not self.repository.exists_by_id(movie_id):
            return Result.not_found()
        try:
            self.repository.delete_by_id(movie_id)
        except NoResultFound:
            return Result.not_found()
        except IntegrityError:
            logger.warning("Movie %s is referenced and cannot be deleted", movie_id)
            return Result.conflict()
        logger.info("Movie %s deleted", movie_id)
        return Result.success()
