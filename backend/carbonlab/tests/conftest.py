import os
os.environ["TESTING"] = "1"
os.environ.setdefault("AUTO_CREATE_TABLES", "0")
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import sys
from pathlib import Path
import shutil

import uuid

sys.path.append(str(Path(__file__).resolve().parents[2]))

from carbonlab.main import app
from carbonlab.database import Base, build_engine, get_db

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def upload_dir(tmp_path):
    d = tmp_path / "uploads"
    d.mkdir()
    os.environ["UPLOAD_DIR"] = str(d)
    yield d
    shutil.rmtree(d, ignore_errors=True)

@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def unique_number(prefix: str) -> str:
    """Experiment numbers are unique across the shared test database."""

    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def create_biochar(client, **fields):
    payload = {"experiment_number": unique_number("BC")}
    payload.update(fields)
    resp = client.post("/api/biochar/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_graphene(client, **fields):
    payload = {"experiment_number": unique_number("GR")}
    payload.update(fields)
    resp = client.post("/api/graphene/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def combine(client, lot_number, experiment_ids, **fields):
    payload = {"lotNumber": lot_number, "experimentIds": experiment_ids}
    payload.update(fields)
    return client.post("/api/biochar/combine-lot", json=payload)


PDF_BYTES = b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF\n"
