"""Pytest fixtures: test client, test DB (in-memory SQLite)."""
import os

import pytest
from fastapi.testclient import TestClient

# Test ortamında in-memory SQLite (uygulama import edilmeden önce set edilmeli)
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "development")
# Anahtar yok: analiz sabit örnek sonuç döner
os.environ["OPENAI_API_KEY"] = ""
os.environ["GA_MEASUREMENT_ID"] = ""
os.environ["GA_API_SECRET"] = ""
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("STRIPE_PREMIUM_PRICE_ID", "price_test_premium")
# Rate limit yüksek olsun ki tüm testler geçebilsin
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "1000")
os.environ.setdefault("RATE_LIMIT_REGISTER_PER_MINUTE", "1000")
os.environ.setdefault("RATE_LIMIT_LOGIN_PER_MINUTE", "1000")

from sqlmodel import Session, SQLModel  # noqa: E402

from tonguemap import models  # noqa: E402,F401
from tonguemap.core.database import engine  # noqa: E402
from tonguemap.core.rate_limit import limiter  # noqa: E402
from tonguemap.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_db():
    """Her test temiz tablolar ve sıfır rate limit sayacı ile başlar."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    limiter.reset()
    yield


@pytest.fixture
def db():
    with Session(engine) as session:
        yield session


@pytest.fixture(scope="function")
def client():
    """TestClient; lifespan ile tablolar hazır olur."""
    with TestClient(app) as c:
        yield c


def _register_and_login(client: TestClient, email: str, password: str = "test123456") -> dict:
    client.post(
        "/auth/register",
        data={"email": email, "password": password, "full_name": "Test User"},
    )
    r = client.post("/auth/login", data={"email": email, "password": password})
    assert r.status_code == 200, f"Login failed: {r.status_code} {r.text}"
    # Oturum çerezi sonraki anonim isteklere taşınmasın
    client.cookies.clear()
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def auth_headers(client: TestClient):
    """Kayıtlı kullanıcı token'ı ile Authorization header döner."""
    return _register_and_login(client, "test@example.com")


@pytest.fixture
def login_as(client: TestClient):
    """İkinci bir kullanıcı için header üretir."""
    return lambda email: _register_and_login(client, email)


@pytest.fixture
def user_id(client: TestClient, auth_headers: dict) -> int:
    return client.get("/auth/me", headers=auth_headers).json()["id"]
