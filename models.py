import sqlite3

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()


@event.listens_for(Engine, "connect")
def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores foreign keys unless asked per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


user_role = db.Table(
    'tb_user_role',
    db.Column('user_id', db.Integer, db.ForeignKey('tb_user.id'), primary_key=True),
    db.Column('role_id', db.Integer, db.ForeignKey('tb_role.id'), primary_key=True),
)


class Role(db.Model):
    __tablename__ = 'tb_role'
    id = db.Column(db.Integer, primary_key=True)
    authority = db.Column(db.String(50), unique=True, nullable=False)


class User(db.Model):
    __tablename__ = 'tb_user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(120), unique=True, nullable=False)
    password = db.Column(db.String(128), nullable=False)
    roles = db.relationship('Role', secondary=user_role, lazy='selectin')


class Genre(db.Model):
    __tablename__ = 'tb_genre'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(80), nullable=False)
    movies = db.relationship('Movie', back_populates='genre')


class Movie(db.Model):
    __tablename__ = 'tb_movie'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(80), nullable=False)
    score = db.Column(db.Float, nullable=False, default=0.0)
    count = db.Column(db.Integer, nullable=False, default=0)
    image = db.Column(db.String(300), nullable=False)
    genre_id = db.Column(db.Integer, db.ForeignKey('tb_genre.id'), nullable=False)
    genre = db.relationship('Genre', back_populates='movies')
    scores = db.relationship('Score', back_populates='movie', passive_deletes='all')


class Score(db.Model):
    __tablename__ = 'tb_score'
    movie_id = db.Column(db.Integer, db.ForeignKey('tb_movie.id'), primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('tb_user.id'), primary_key=True)
    value = db.Column(db.Float, nullable=False)
    movie = db.relationship('Movie', back_populates='scores')
    user = db.relationship('User')
