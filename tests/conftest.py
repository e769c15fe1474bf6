import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from storefront.core.config import Settings
from storefront.main import create_app
from storefront.models.product import Product

TEST_SECRET = "test-secret"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET=TEST_SECRET,
        ENVIRONMENT="test",
        SEED_CATALOG=True,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def engine(app, client):
    # `client` first so the lifespan has created the tables
    return app.state.engine


def register(client: TestClient, username: str, password: str = "secret123") -> dict:
    resp = client.post(
        "/api/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": password},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client) -> dict[str, str]:
    return bearer(register(client, "alice")["token"])


@pytest.fixture
def bob(client) -> dict[str, str]:
    return bearer(register(client, "bob")["token"])


@pytest.fixture
def make_product(engine):
    def _make(name="Test Paint", price=10.0, stock=10, category="Tests", description=None) -> int:
        with Session(engine) as session:
            product = Product(
                name=name,
                price=price,
                stock=stock,
                category=category,
                description=description,
            )
            session.add(product)
            session.commit()
            session.refresh(product)
            return product.id

    return _make


@pytest.fixture
def set_stock(engine):
    def _set(product_id: int, stock: int) -> None:
        with Session(engine) as session:
            product = session.get(Product, product_id)
            product.stock = stock
            session.add(product)
            session.commit()

    return _set
