"""Tests for the HTTP/JSON contract of the Flask application."""

import logging

import pytest

from concessionaria.services import PersistenceError
from concessionaria.web_server import WebServer, build_server


def _create(api, path, body):
    response = api.post(f"/api/{path}", json=body)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


class TestGeneralRoutes:
    def test_welcome(self, api):
        response = api.get("/api")
        assert response.status_code == 200
        assert response.get_json() == {"mensagem": "Olá, seja bem-vindo!"}

    def test_health(self, api):
        response = api.get("/api/health")
        assert response.status_code == 200
        assert response.get_json()["status"] == "ok"

    def test_health_reports_unreachable_database(self, memory_services):
        server = WebServer(*memory_services, health_check=lambda: False)
        response = server.app.test_client().get("/api/health")
        assert response.status_code == 503

    def test_cors_header(self, api):
        response = api.get("/api/cars", headers={"Origin": "http://localhost:5173"})
        assert response.headers.get("Access-Control-Allow-Origin") in ("*", "http://localhost:5173")


class TestClientsEndpoints:
    def test_create_then_get_by_returned_id(self, api, ana):
        created = _create(api, "clients", ana)
        assert created["mensagem"] == "Cliente cadastrado com sucesso."

        response = api.get(f"/api/clients/{created['idCliente']}")
        assert response.status_code == 200
        body = response.get_json()
        assert body["nome"] == "ANA"
        assert body["cpf"] == "11122233344"
        assert body["situacao"] is True

    def test_missing_fields(self, api):
        response = api.post("/api/clients", json={"nome": "ana"})
        assert response.status_code == 400
        assert response.get_json()["campos"] == ["cpf", "telefone"]

    def test_duplicate_cpf(self, api, ana):
        _create(api, "clients", ana)
        response = api.post("/api/clients", json=ana)
        assert response.status_code == 400
        assert response.get_json() == {"mensagem": "Erro ao cadastrar cliente."}

    def test_update(self, api, ana):
        client_id = _create(api, "clients", ana)["idCliente"]
        response = api.put(f"/api/clients/{client_id}", json={**ana, "nome": "ana paula"})
        assert response.status_code == 200
        assert response.get_json()["mensagem"] == f"Cliente {client_id} atualizado com sucesso."
        assert api.get(f"/api/clients/{client_id}").get_json()["nome"] == "ANA PAULA"

    def test_update_unknown_id(self, api, ana):
        response = api.put("/api/clients/999", json=ana)
        assert response.status_code == 400
        assert api.get("/api/clients").get_json() == []

    def test_remove_is_soft(self, api, ana):
        client_id = _create(api, "clients", ana)["idCliente"]
        response = api.put(f"/api/remove/clients/{client_id}")
        assert response.status_code == 200
        assert response.get_json()["mensagem"] == "Cliente removido com sucesso."
        assert api.get("/api/clients").get_json() == []
        assert api.get(f"/api/clients/{client_id}").get_json()["situacao"] is False

    def test_remove_unknown_id(self, api):
        response = api.put("/api/remove/clients/31")
        assert response.status_code == 400


class TestCarsEndpoints:
    def test_malformed_id(self, api):
        response = api.get("/api/cars/abc")
        assert response.status_code == 400
        assert response.get_json() == {"mensagem": "ID incorreto"}

    @pytest.mark.parametrize("raw_id", ["0", "-4", "1.5"])
    def test_non_positive_or_fractional_id(self, api, raw_id):
        assert api.get(f"/api/cars/{raw_id}").status_code == 400
        assert api.put(f"/api/cars/{raw_id}", json={}).status_code == 400
        assert api.put(f"/api/remove/cars/{raw_id}").status_code == 400

    def test_id_beyond_64_bits(self, api, corolla):
        huge = "99999999999999999999"
        assert api.get(f"/api/cars/{huge}").get_json() == {"mensagem": "ID incorreto"}
        assert api.put(f"/api/cars/{huge}", json=corolla).status_code == 400
        assert api.put(f"/api/remove/cars/{huge}").status_code == 400

    def test_year_beyond_64_bits(self, api, corolla):
        response = api.post("/api/cars", json={**corolla, "ano": 10 ** 20})
        assert response.status_code == 400
        assert response.get_json()["campos"] == ["ano"]
        assert api.get("/api/cars").get_json() == []

    def test_unknown_id_is_informational_200(self, api):
        response = api.get("/api/cars/999999")
        assert response.status_code == 200
        assert response.get_json() == {"mensagem": "Nenhum carro encontrado com o ID fornecido."}

    def test_list_returns_array(self, api, corolla):
        _create(api, "cars", corolla)
        _create(api, "cars", {**corolla, "modelo": "yaris"})
        body = api.get("/api/cars").get_json()
        assert [car["modelo"] for car in body] == ["COROLLA", "YARIS"]
        assert body[0]["marca"] == "TOYOTA"
        assert body[0]["cor"] == "PRETO"

    def test_invalid_year(self, api, corolla):
        response = api.post("/api/cars", json={**corolla, "ano": "novo"})
        assert response.status_code == 400
        assert response.get_json()["campos"] == ["ano"]

    def test_body_must_be_json_object(self, api):
        response = api.post("/api/cars", data="marca=fiat", content_type="text/plain")
        assert response.status_code == 400
        response = api.post("/api/cars", json=["fiat"])
        assert response.status_code == 400


class TestOrdersEndpoints:
    @pytest.fixture
    def refs(self, api, ana, corolla):
        client_id = _create(api, "clients", ana)["idCliente"]
        car_id = _create(api, "cars", corolla)["idCarro"]
        return client_id, car_id

    def test_create_with_comma_value(self, api, refs):
        client_id, car_id = refs
        created = _create(api, "orders", {
            "idCliente": client_id, "idCarro": car_id, "dataPedido": "2024-03-10", "valorPedido": "1500,50",
        })
        body = api.get(f"/api/orders/{created['idPedido']}").get_json()
        assert body["valorPedido"] == pytest.approx(1500.50)
        assert body["dataPedido"] == "2024-03-10"
        assert body["nomeCliente"] == "ANA"
        assert body["marcaCarro"] == "TOYOTA"
        assert body["modeloCarro"] == "COROLLA"

    def test_rejects_bad_date_and_value(self, api, refs):
        client_id, car_id = refs
        response = api.post("/api/orders", json={
            "idCliente": client_id, "idCarro": car_id, "dataPedido": "2024-02-31", "valorPedido": 0,
        })
        assert response.status_code == 400
        body = response.get_json()
        assert body["campos"] == ["dataPedido", "valorPedido"]
        assert body["mensagem"] == "Campos inválidos ou ausentes: dataPedido, valorPedido."
        assert api.get("/api/orders").get_json() == []

    def test_value_too_large_for_float(self, api, refs):
        client_id, car_id = refs
        response = api.post("/api/orders", json={
            "idCliente": client_id, "idCarro": car_id, "dataPedido": "2024-03-10", "valorPedido": 10 ** 400,
        })
        assert response.status_code == 400
        assert response.get_json()["campos"] == ["valorPedido"]

    def test_unknown_client_reference(self, api, refs):
        _, car_id = refs
        response = api.post("/api/orders", json={
            "idCliente": 500, "idCarro": car_id, "dataPedido": "2024-03-10", "valorPedido": 10,
        })
        assert response.status_code == 400
        assert response.get_json() == {"mensagem": "Erro ao cadastrar pedido."}

    def test_update_and_remove(self, api, refs):
        client_id, car_id = refs
        payload = {"idCliente": client_id, "idCarro": car_id, "dataPedido": "10/03/2024", "valorPedido": 100}
        order_id = _create(api, "orders", payload)["idPedido"]

        response = api.put(f"/api/orders/{order_id}", json={**payload, "valorPedido": "250,00"})
        assert response.status_code == 200
        assert api.get(f"/api/orders/{order_id}").get_json()["valorPedido"] == pytest.approx(250.0)

        assert api.put(f"/api/remove/orders/{order_id}").status_code == 200
        assert api.get("/api/orders").get_json() == []
        assert api.get(f"/api/orders/{order_id}").get_json()["situacao"] is False

    def test_unknown_order(self, api):
        response = api.get("/api/orders/8")
        assert response.status_code == 200
        assert response.get_json() == {"mensagem": "Nenhum pedido encontrado com o ID fornecido."}


class _BrokenService:
    """Service whose database is unreachable."""

    def _fail(self, *args, **kwargs):
        raise PersistenceError("conexão recusada")

    list_all = get_by_id = create = update = soft_delete = _fail


class TestPersistenceFailures:
    @pytest.fixture
    def broken_api(self):
        broken = _BrokenService()
        server = WebServer(broken, broken, broken)
        return server.app.test_client()

    def test_list_failure_is_500(self, broken_api):
        response = broken_api.get("/api/cars")
        assert response.status_code == 500
        assert response.get_json() == {"mensagem": "Não foi possível acessar a lista de carros."}

    def test_get_failure_is_500(self, broken_api):
        assert broken_api.get("/api/clients/1").status_code == 500

    def test_create_failure_is_500(self, broken_api, ana):
        response = broken_api.post("/api/clients", json=ana)
        assert response.status_code == 500
        assert response.get_json() == {"mensagem": "Não foi possível inserir o cliente."}

    def test_update_and_remove_failures_are_500(self, broken_api, corolla):
        assert broken_api.put("/api/cars/1", json=corolla).status_code == 500
        assert broken_api.put("/api/remove/cars/1").status_code == 500


def test_build_server_uses_sqlite(db, ana):
    server = build_server(db)
    api = server.app.test_client()
    created = api.post("/api/clients", json=ana).get_json()
    row = db.query("SELECT nome FROM clientes WHERE id_cliente = ?", (created["idCliente"],))
    assert row[0]["nome"] == "ANA"
    assert api.get("/api/health").status_code == 200


def test_database_failure_logged_once(db, caplog):
    api = build_server(db).app.test_client()
    db.close()
    with caplog.at_level(logging.ERROR):
        response = api.get("/api/cars")
    assert response.status_code == 500
    errors = [record for record in caplog.records if record.levelno >= logging.ERROR]
    assert len(errors) == 1
    assert errors[0].getMessage().startswith("Erro ao listar carros")


def test_unexpected_error_is_logged_by_handler(memory_services, caplog):
    clients, cars, orders = memory_services

    def explode():
        raise RuntimeError("falha inesperada")

    cars.list_all = explode
    api = WebServer(clients, cars, orders).app.test_client()
    with caplog.at_level(logging.ERROR):
        assert api.get("/api/cars").status_code == 500
    assert any(record.getMessage() == "Erro ao consultar carros" for record in caplog.records)
