from __future__ import annotations

from pathlib import Path

import pytest

from compblocks import create_app

AUTH = {"X-User-Id": "tester"}


@pytest.fixture()
def app(tmp_path: Path):
    app = create_app({
        "TESTING": True,
        "DATABASE": str(tmp_path / "test.sqlite"),
        "AUTO_INIT_DB": True,
    })
    yield app


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture()
def ctx(app):
    with app.app_context():
        yield app
