import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("SECRET_KEY", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-with-enough-length")
os.environ.setdefault("PEPPER", "test-pepper")
os.environ["DATABASE_URL"] = "sqlite:///:memory:"


@pytest.fixture()
def client():
    from app import app, db, init_db

    app.config.update(TESTING=True)
    with app.app_context():
        db.drop_all()
        init_db()
        yield app.test_client()
        db.session.remove()
        db.drop_all()
