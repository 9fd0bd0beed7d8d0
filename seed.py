import os

from app import app, db
from models import Genre, Movie, Role, User
from security import hash_password
from services.user_service import ADMIN_ROLE, CLIENT_ROLE

seed_genres = ["Action", "Comedy", "Drama", "Science Fiction", "Animation"]

seed_movies = [
    ("The Witcher", 4.5, 2, "https://image.tmdb.org/t/p/w500/jBJWaqoSCiARWtfV0GlqHrcdidd.jpg", "Action"),
    ("Venom: Let There Be Carnage", 3.3, 3, "https://image.tmdb.org/t/p/w500/vIgyYkXkg6NC2whRbYjBD7eb3Er.jpg", "Action"),
    ("O Espetacular Homem-Aranha 2", 0.0, 0, "https://image.tmdb.org/t/p/w500/u7SeO6Y42P7VCTWLhpnL96cyOqd.jpg", "Science Fiction"),
    ("Matrix Resurrections", 0.0, 0, "https://image.tmdb.org/t/p/w500/hv7o3VgfsairBoQFAawgaQ4cR1m.jpg", "Science Fiction"),
    ("Shang-Chi e a Lenda dos Dez Aneis", 0.0, 0, "https://image.tmdb.org/t/p/w500/cinER0ESG0eJ49kXlExM0MEWGxW.jpg", "Action"),
]


def seed_user(username, password, authority):
    if User.query.filter_by(username=username).first():
        print(f"User {username} already exists")
        return
    user = User(username=username, password=hash_password(password))
    user.roles.append(Role.query.filter_by(authority=authority).first())
    db.session.add(user)
    print(f"User {username} created!")


with app.app_context():

    # ------------------------------
    # Seed Users
    # ------------------------------
    seed_user(
        os.getenv("ADMIN_USERNAME", "maria@gmail.com"),
        os.getenv("ADMIN_PASSWORD", "Admin123!"),
        ADMIN_ROLE,
    )
    seed_user("alex@gmail.com", "Client123!", CLIENT_ROLE)

    # ------------------------------
    # Seed Genres
    # ------------------------------
    genres = {}
    for name in seed_genres:
        genre = Genre.query.filter_by(name=name).first()
        if genre is None:
            genre = Genre(name=name)
            db.session.add(genre)
            print(f"Added genre: {name}")
        genres[name] = genre

    # ------------------------------
    # Seed Movies
    # ------------------------------
    for title, score, count, image, genre_name in seed_movies:
        # Prevent duplicates
        if Movie.query.filter_by(title=title).first():
            print(f"Skipping {title} (already in DB)")
            continue

        movie = Movie(title=title, score=score, count=count, image=image, genre=genres[genre_name])
        db.session.add(movie)
        print(f"Added movie: {title}")

    db.session.commit()
    print("Seeding complete!")
