import re
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Any, Dict

from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load, validates, validate


def format_score(value):
    """Round to two decimals, half-even, dropping trailing zeros (4.50 -> 4.5)."""
    if value is None:
        return None
    rounded = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_EVEN)
    return float(rounded)


class ScoreField(fields.Float):
    def _serialize(self, value, attr, obj, **kwargs):
        return format_score(value)


class MovieSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    id = fields.Int(dump_only=True)
    title = fields.Str(
        required=True,
        validate=validate.Length(min=5, max=80, error="Title must be between 5 and 80 characters"),
    )
    score = ScoreField(
        load_default=0.0,
        validate=validate.Range(min=0, error="Score should be greater than or equal to zero"),
    )
    count = fields.Int(
        load_default=0,
        validate=validate.Range(min=0, error="Count should be greater than or equal to zero"),
    )
    image = fields.Str(required=True)
    genre_id = fields.Int(required=True)

    @pre_load
    def strip_strings(self, data: Dict[str, Any], **kwargs):
        for key in ("title", "image"):
            value = data.get(key)
            if isinstance(value, str):
                data[key] = value.strip()
        return data

    @validates("image")
    def validate_image(self, value: str, **kwargs):
        if not value:
            raise ValidationError("Required field")
        try:
            validate.URL(relative=False)(value)
        except ValidationError:
            raise ValidationError("Field must be a valid url")


class MovieGenreSchema(Schema):
    id = fields.Int(dump_only=True)
    title = fields.Str()
    score = ScoreField()
    count = fields.Int()
    image = fields.Str()
    genre = fields.Function(lambda movie: movie.genre.name if movie.genre else None)


class ScoreSchema(Schema):
    movie_id = fields.Int(required=True)
    score = fields.Float(
        required=True,
        validate=validate.Range(min=0, max=5, error="Score must be between 0 and 5"),
    )


class RegisterSchema(Schema):
    username = fields.Email(required=True, error_messages={"invalid": "Username must be a valid email"})
    password = fields.Str(required=True)

    @pre_load
    def strip_username(self, data: Dict[str, Any], **kwargs):
        username = data.get("username")
        if isinstance(username, str):
            data["username"] = username.strip()
        return data

    @validates("password")
    def validate_password(self, value: str, **kwargs):
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters")
        if len(value) > 64:
            raise ValidationError("Password must be at most 64 characters")
        if not re.search(r"\d", value):
            raise ValidationError("Password must have a number")
        if not re.search(r"[^A-Za-z0-9]", value):
            raise ValidationError("Password must have at least 1 special character")


class LoginSchema(Schema):
    username = fields.Str(required=True)
    password = fields.Str(required=True)


class UserSchema(Schema):
    id = fields.Int()
    username = fields.Str()
    roles = fields.Function(lambda user: sorted(role.authority for role in user.roles))


class GenreSchema(Schema):
    id = fields.Int()
    name = fields.Str()


def dump_page(page, schema):
    return {
        "content": schema.dump(page.content, many=True),
        "total_elements": page.total,
        "total_pages": page.total_pages,
        "number": page.page,
        "size": page.size,
        "number_of_elements": len(page.content),
        "first": page.first,
        "last": page.last,
        "empty": page.empty,
    }


movie_schema = MovieSchema()
movie_genre_schema = MovieGenreSchema()
score_schema = ScoreSchema()
register_schema = RegisterSchema()
login_schema = LoginSchema()
user_schema = UserSchema()
genre_schema = GenreSchema()
