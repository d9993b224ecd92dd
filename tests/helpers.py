from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from app.core.config import Settings  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import build_engine, build_session_factory  # noqa: E402
from app.main import create_app  # noqa: E402
import app.models  # noqa: E402,F401

TEST_USER = {"username": "encargado", "password": "secreto123"}


def make_session() -> Session:
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    return build_session_factory(engine)()


def make_client(*, login: bool = True) -> TestClient:
    application = create_app(Settings(database_url="sqlite://", auth_secret="test-secret"))
    Base.metadata.create_all(bind=application.state.engine)
    client = TestClient(application)
    if login:
        client.post("/auth/register", json=TEST_USER)
        r = client.post("/auth/login", json=TEST_USER)
        assert r.status_code == 200, r.text
    return client


def create_supplier(client: TestClient, name: str = "Distribuidora Norte", **extra) -> dict:
    r = client.post("/suppliers", json={"name": name, **extra})
    assert r.status_code == 201, r.text
    return r.json()


def create_branch(client: TestClient, name: str = "Calle 59") -> dict:
    r = client.post("/sucursales", json={"name": name})
    assert r.status_code == 201, r.text
    return r.json()


def create_invoice(client: TestClient, supplier: dict, branch: dict, number: str = "0001-00000123", **extra) -> dict:
    body = {
        "invoice_external_id": number,
        "supplier_id": supplier["id"],
        "branch_id": branch["id"],
        "document_date": "2026-10-01",
        "received_date": "2026-10-03",
        "document_type": "Factura A",
        "description": "Mercadería",
        "total_amount": 1000,
    }
    body.update(extra)
    r = client.post("/payments", json=body)
    assert r.status_code == 201, r.text
    return r.json()
