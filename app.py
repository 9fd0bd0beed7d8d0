import logging
import os
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_jwt_extended import JWTManager

from models import db
from repositories import RoleRepository
from routes.auth_routes import auth_bp
from routes.movie_routes import movie_bp
from routes.score_routes import score_bp
from routes.user_routes import user_bp
from services.user_service import ADMIN_ROLE, CLIENT_ROLE

load_dotenv()


def setup_logging(level_name="INFO"):
    """Configure the root logger once; later calls keep the existing handlers."""
    root = logging.getLogger()
    if root.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.setLevel(getattr(logging, level_name.upper(), logging.INFO))
    root.addHandler(handler)


setup_logging(os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", "sqlite:///dsmovie.db")
app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
app.config['SECRET_KEY'] = os.getenv("SECRET_KEY")
app.config["JWT_SECRET_KEY"] = os.getenv("JWT_SECRET_KEY")
app.config["JWT_TOKEN_LOCATION"] = ["headers", "cookies"]
app.config["JWT_COOKIE_SECURE"] = False
app.config["JWT_COOKIE_CSRF_PROTECT"] = False
app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(minutes=int(os.getenv("JWT_ACCESS_TOKEN_MINUTES", "60")))
app.config["DEFAULT_PAGE_SIZE"] = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))

db.init_app(app)

jwt = JWTManager(app)
app.register_blueprint(auth_bp)
app.register_blueprint(movie_bp)
app.register_blueprint(score_bp)
app.register_blueprint(user_bp)


def init_db():
    db.create_all()
    RoleRepository().ensure([ADMIN_ROLE, CLIENT_ROLE])


with app.app_context():
    init_db()


@app.errorhandler(404)
def not_found(error):
    return jsonify({"message": "Resource not found"}), 404


@app.errorhandler(405)
def method_not_allowed(error):
    return jsonify({"message": "Method not allowed"}), 405


@app.errorhandler(500)
def internal_error(error):
    logger.exception("Unhandled error: %s", error)
    db.session.rollback()
    return jsonify({"message": "Internal server error"}), 500


if __name__ == '__main__':
    app.run(debug=True)
