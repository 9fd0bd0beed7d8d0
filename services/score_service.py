import logging

from sqlalchemy.exc import IntegrityError

from models import Score
from repositories import MovieRepository, ScoreRepository
from schemas import movie_schema
from services.errors import Result
from services.user_service import UserService

logger = logging.getLogger(__name__)


class ScoreService:
    """Records a user's score for a movie and refreshes the movie's average."""

    def __init__(self, user_service=None, movie_repository=None, score_repository=None):
        self.user_service = user_service or UserService()
        self.movie_repository = movie_repository or MovieRepository()
        self.score_repository = score_repository or ScoreRepository()

    def save_score(self, identity, movie_id, value):
        user_result = self.user_service.current_user(identity)
        if not user_result.ok:
            return user_result
        user = user_result.value

        movie = self.movie_repository.find_by_id(movie_id)
        if movie is None:
            return Result.not_found()

        score = next(
            (s for s in movie.scores if s.user is user or (s.user_id is not None and s.user_id == user.id)),
            None,
        )
        if score is None:
            score = Score(movie=movie, user=user, value=value)
        else:
            score.value = value
        self.score_repository.add(score)

        values = [s.value for s in movie.scores]
        movie.score = sum(values) / len(values)
        movie.count = len(values)
        try:
            movie = self.movie_repository.save(movie)
        except IntegrityError as exc:
            logger.warning("Score of movie %s by %s rejected: %s", movie_id, user.username, exc.orig)
            return Result.conflict()
        logger.info("User %s scored movie %s with %s", user.username, movie_id, value)
        return Result.success(movie_schema.dump(movie))
