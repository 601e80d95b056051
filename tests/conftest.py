"""Shared fixtures: SQLite-backed and in-memory services plus a Flask test client."""

import pytest

from concessionaria.database import Database
from concessionaria.memory import InMemoryCarService, InMemoryClientService, InMemorySalesOrderService
from concessionaria.services import CarService, ClientService, SalesOrderService
from concessionaria.web_server import WebServer


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "concessionaria.db"))
    yield database
    database.close()


@pytest.fixture
def sqlite_services(db):
    return ClientService(db), CarService(db), SalesOrderService(db)


@pytest.fixture
def memory_services():
    clients = InMemoryClientService()
    cars = InMemoryCarService()
    return clients, cars, InMemorySalesOrderService(clients, cars)


@pytest.fixture(params=["sqlite", "memory"])
def services(request):
    """Runs the test once per repository implementation."""
    return request.getfixturevalue(f"{request.param}_services")


@pytest.fixture
def api(services):
    server = WebServer(*services)
    server.app.config["TESTING"] = True
    return server.app.test_client()


@pytest.fixture
def ana():
    return {"nome": "ana", "cpf": "11122233344", "telefone": "11999999999"}


@pytest.fixture
def corolla():
    return {"marca": "toyota", "modelo": "corolla", "ano": 2020, "cor": "preto"}
