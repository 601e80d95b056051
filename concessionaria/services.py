# services.py
# Camada de serviços: persistência dos recursos da concessionária

import sqlite3
from typing import List, Protocol, TypeVar

from .database import Database
from .logger import log_event, log_error
from .models import Car, Client, SalesOrder
from .validation import CAR_FIELDS, CLIENT_FIELDS, ORDER_FIELDS, ValidationError, check_required

T = TypeVar("T")


class NotFoundError(LookupError):
    """Nenhum registro corresponde ao ID informado"""

    def __init__(self, resource: str, record_id: int):
        self.resource = resource
        self.record_id = record_id
        super().__init__(f"{resource} {record_id} não encontrado")


class PersistenceError(RuntimeError):
    """Falha ao executar o comando no banco de dados"""


class ConstraintError(PersistenceError):
    """O banco rejeitou os dados (CPF duplicado, chave estrangeira inexistente...)"""


class Repository(Protocol[T]):
    """Contrato comum dos serviços de persistência (SQLite ou memória)"""

    def list_all(self) -> List[T]: ...

    def get_by_id(self, record_id: int) -> T: ...

    def create(self, record: T) -> int: ...

    def update(self, record: T) -> None: ...

    def soft_delete(self, record_id: int) -> None: ...


def _upper(value: str) -> str:
    return str(value).strip().upper()


def normalize_client(client: Client) -> Client:
    check_required({"nome": client.name, "cpf": client.cpf, "telefone": client.phone}, CLIENT_FIELDS)
    client.name = _upper(client.name)
    client.cpf = str(client.cpf).strip()
    client.phone = str(client.phone).strip()
    return client


def normalize_car(car: Car) -> Car:
    check_required(
        {"marca": car.brand, "modelo": car.model, "ano": car.year, "cor": car.color}, CAR_FIELDS
    )
    car.brand = _upper(car.brand)
    car.model = _upper(car.model)
    car.color = _upper(car.color)
    return car


def normalize_order(order: SalesOrder) -> SalesOrder:
    check_required(
        {
            "idCliente": order.client_id,
            "idCarro": order.car_id,
            "dataPedido": order.order_date,
            "valorPedido": order.order_value,
        },
        ORDER_FIELDS,
    )
    if order.order_value <= 0:
        raise ValidationError(["valorPedido"])
    return order


def _wrap_db_error(message: str, exc: sqlite3.Error) -> PersistenceError:
    log_error(message, exc)
    if isinstance(exc, sqlite3.IntegrityError):
        return ConstraintError(f"{message}: {exc}")
    return PersistenceError(f"{message}: {exc}")


class ClientService:
    resource = "Cliente"

    def __init__(self, db: Database):
        self.db = db

    def list_all(self) -> List[Client]:
        try:
            rows = self.db.query("SELECT * FROM clientes WHERE situacao = 1 ORDER BY id_cliente")
        except sqlite3.Error as e:
            raise _wrap_db_error("Erro ao listar clientes", e) from e
        return [Client.from_row(row) for row in rows]

    def get_by_id(self, record_id: int) -> Client:
        try:
            rows = self.db.query("SELECT * FROM clientes WHERE id_cliente = ?", (record_id,))
        except sqlite3.Error as e:
            raise _wrap_db_error(f"Erro ao buscar cliente {record_id}", e) from e
        client = None
        for row in rows:
            client = Client.from_row(row)
        if client is None:
            raise NotFoundError(self.resource, record_id)
        return client

    def create(self, record: Client) -> int:
        normalize_client(record)
        try:
            cur = self.db.execute(
                "INSERT INTO clientes (nome, cpf, telefone) VALUES (?, ?, ?)",
                (record.name, record.cpf, record.phone),
            )
        except sqlite3.Error as e:
            raise _wrap_db_error("Erro ao cadastrar cliente", e) from e
        record.id = cur.lastrowid
        log_event(f"Cliente cadastrado com sucesso. ID: {record.id}")
        return record.id

    def update(self, record: Client) -> None:
        normalize_client(record)
        try:
            cur = self.db.execute(
                "UPDATE clientes SET nome = ?, cpf = ?, telefone = ? WHERE id_cliente = ?",
                (record.name, record.cpf, record.phone, record.id),
            )
        except sqlite3.Error as e:
            raise _wrap_db_error(f"Erro ao atualizar cliente {record.id}", e) from e
        if cur.rowcount == 0:
            raise NotFoundError(self.resource, record.id)
        log_event(f"Cliente atualizado com sucesso. ID: {record.id}")

    def soft_delete(self, record_id: int) -> None:
        try:
            cur = self.db.execute("UPDATE clientes SET situacao = 0 WHERE id_cliente = ?", (record_id,))
        except sqlite3.Error as e:
            raise _wrap_db_error(f"Erro ao remover cliente {record_id}", e) from e
        if cur.rowcount == 0:
            raise NotFoundError(self.resource, record_id)
        log_event(f"Cliente removido com sucesso. ID: {record_id}")


class CarService:
    resource = "Carro"

    def __init__(self, db: Database):
        self.db = db

    def list_all(self) -> List[Car]:
        try:
            rows = self.db.query("SELECT * FROM carros WHERE situacao = 1 ORDER BY id_carro")
        except sqlite3.Error as e:
            raise _wrap_db_error("Erro ao listar carros", e) from e
        return [Car.from_row(row) for row in rows]

    def get_by_id(self, record_id: int) -> Car:
        try:
            rows = self.db.query("SELECT * FROM carros WHERE id_carro = ?", (record_id,))
        except sqlite3.Error as e:
            raise _wrap_db_error(f"Erro ao buscar carro {record_id}", e) from e
        car = None
        for row in rows:
            car = Car.from_row(row)
        if car is None:
            raise NotFoundError(self.resource, record_id)
        return car

    def create(self, record: Car) -> int:
        normalize_car(record)
        try:
            cur = self.db.execute(
                "INSERT INTO carros (marca, modelo, ano, cor) VALUES (?, ?, ?, ?)",
                (record.brand, record.model, record.year, record.color),
            )
        except sqlite3.Error as e:
            raise _wrap_db_error("Erro ao cadastrar carro", e) from e
        record.id = cur.lastrowid
        log_event(f"Carro cadastrado com sucesso. ID: {record.id}")
        return record.id

    def update(self, record: Car) -> None:
        normalize_car(record)
        try:
            cur = self.db.execute(
                "UPDATE carros SET marca = ?, modelo = ?, ano = ?, cor = ? WHERE id_carro = ?",
                (record.brand, record.model, record.year, record.color, record.id),
            )
        except sqlite3.Error as e:
            raise _wrap_db_error(f"Erro ao atualizar carro {record.id}", e) from e
        if cur.rowcount == 0:
            raise NotFoundError(self.resource, record.id)
        log_event(f"Carro atualizado com sucesso. ID: {record.id}")

    def soft_delete(self, record_id: int) -> None:
        try:
            cur = self.db.execute("UPDATE carros SET situacao = 0 WHERE id_carro = ?", (record_id,))
        except sqlite3.Error as e:
            raise _wrap_db_error(f"Erro ao remover carro {record_id}", e) from e
        if cur.rowcount == 0:
            raise NotFoundError(self.resource, record_id)
        log_event(f"Carro removido com sucesso. ID: {record_id}")


# Visão desnormalizada usada nas leituras de pedidos
_ORDER_SELECT = """
    SELECT
        pv.id_pedido,
        pv.id_cliente,
        c.nome AS nome_cliente,
        pv.id_carro,
        ca.marca AS marca_carro,
        ca.modelo AS modelo_carro,
        pv.data_pedido,
        pv.valor_pedido,
        pv.situacao
    FROM pedidos_venda pv
    JOIN clientes c ON pv.id_cliente = c.id_cliente
    JOIN carros ca ON pv.id_carro = ca.id_carro
"""


class SalesOrderService:
    resource = "Pedido"

    def __init__(self, db: Database):
        self.db = db

    def list_all(self) -> List[SalesOrder]:
        try:
            rows = self.db.query(_ORDER_SELECT + " WHERE pv.situacao = 1 ORDER BY pv.id_pedido")
        except sqlite3.Error as e:
            raise _wrap_db_error("Erro ao listar pedidos", e) from e
        return [SalesOrder.from_row(row) for row in rows]

    def get_by_id(self, record_id: int) -> SalesOrder:
        try:
            rows = self.db.query(_ORDER_SELECT + " WHERE pv.id_pedido = ?", (record_id,))
        except sqlite3.Error as e:
            raise _wrap_db_error(f"Erro ao buscar pedido {record_id}", e) from e
        order = None
        for row in rows:
            order = SalesOrder.from_row(row)
        if order is None:
            raise NotFoundError(self.resource, record_id)
        return order

    def create(self, record: SalesOrder) -> int:
        normalize_order(record)
        try:
            cur = self.db.execute(
                "INSERT INTO pedidos_venda (id_cliente, id_carro, data_pedido, valor_pedido) VALUES (?, ?, ?, ?)",
                (record.client_id, record.car_id, record.order_date.isoformat(), record.order_value),
            )
        except sqlite3.Error as e:
            raise _wrap_db_error("Erro ao cadastrar pedido", e) from e
        record.id = cur.lastrowid
        log_event(f"Pedido de venda cadastrado com sucesso. ID: {record.id}")
        return record.id

    def update(self, record: SalesOrder) -> None:
        normalize_order(record)
        try:
            cur = self.db.execute(
                "UPDATE pedidos_venda SET id_cliente = ?, id_carro = ?, data_pedido = ?, valor_pedido = ? "
                "WHERE id_pedido = ?",
                (record.client_id, record.car_id, record.order_date.isoformat(), record.order_value, record.id),
            )
        except sqlite3.Error as e:
            raise _wrap_db_error(f"Erro ao atualizar pedido {record.id}", e) from e
        if cur.rowcount == 0:
            raise NotFoundError(self.resource, record.id)
        log_event(f"Pedido de venda atualizado com sucesso. ID: {record.id}")

    def soft_delete(self, record_id: int) -> None:
        try:
            cur = self.db.execute("UPDATE pedidos_venda SET situacao = 0 WHERE id_pedido = ?", (record_id,))
        except sqlite3.Error as e:
            raise _wrap_db_error(f"Erro ao remover pedido {record_id}", e) from e
        if cur.rowcount == 0:
            raise NotFoundError(self.resource, record_id)
        log_event(f"Pedido removido com sucesso. ID: {record_id}")
