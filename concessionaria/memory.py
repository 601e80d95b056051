# memory.py
# Serviços em memória com o mesmo contrato dos serviços SQLite (testes e demonstrações)

import threading
from dataclasses import replace
from typing import Dict, Generic, List, Optional, TypeVar

from .logger import log_event
from .models import Car, Client, SalesOrder
from .services import ConstraintError, NotFoundError, normalize_car, normalize_client, normalize_order

T = TypeVar("T", Client, Car, SalesOrder)


class _InMemoryService(Generic[T]):
    resource = "Registro"

    def __init__(self):
        self._rows: Dict[int, T] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def _normalize(self, record: T) -> T:
        return record

    def _check_constraints(self, record: T) -> None:
        pass

    def _present(self, record: T) -> T:
        return replace(record)

    def find(self, record_id: int) -> Optional[T]:
        """Registro armazenado (ativo ou não) ou None"""
        with self._lock:
            row = self._rows.get(record_id)
            return replace(row) if row is not None else None

    def list_all(self) -> List[T]:
        with self._lock:
            return [self._present(self._rows[key]) for key in sorted(self._rows) if self._rows[key].active]

    def get_by_id(self, record_id: int) -> T:
        with self._lock:
            if record_id not in self._rows:
                raise NotFoundError(self.resource, record_id)
            return self._present(self._rows[record_id])

    def create(self, record: T) -> int:
        self._normalize(record)
        with self._lock:
            self._check_constraints(record)
            record.id = self._next_id
            self._next_id += 1
            self._rows[record.id] = replace(record, active=True)
        log_event(f"{self.resource} cadastrado em memória. ID: {record.id}")
        return record.id

    def update(self, record: T) -> None:
        self._normalize(record)
        with self._lock:
            current = self._rows.get(record.id)
            if current is None:
                raise NotFoundError(self.resource, record.id)
            self._check_constraints(record)
            self._rows[record.id] = replace(record, active=current.active)

    def soft_delete(self, record_id: int) -> None:
        with self._lock:
            current = self._rows.get(record_id)
            if current is None:
                raise NotFoundError(self.resource, record_id)
            current.active = False


class InMemoryClientService(_InMemoryService[Client]):
    resource = "Cliente"

    def _normalize(self, record: Client) -> Client:
        return normalize_client(record)

    def _check_constraints(self, record: Client) -> None:
        for row in self._rows.values():
            if row.cpf == record.cpf and row.id != record.id:
                raise ConstraintError(f"CPF {record.cpf} já cadastrado")


class InMemoryCarService(_InMemoryService[Car]):
    resource = "Carro"

    def _normalize(self, record: Car) -> Car:
        return normalize_car(record)


class InMemorySalesOrderService(_InMemoryService[SalesOrder]):
    """Pedidos em memória; as chaves estrangeiras são checadas nos serviços informados."""

    resource = "Pedido"

    def __init__(self, clients: InMemoryClientService, cars: InMemoryCarService):
        super().__init__()
        self.clients = clients
        self.cars = cars

    def _normalize(self, record: SalesOrder) -> SalesOrder:
        return normalize_order(record)

    def _check_constraints(self, record: SalesOrder) -> None:
        if self.clients.find(record.client_id) is None:
            raise ConstraintError(f"Cliente {record.client_id} inexistente")
        if self.cars.find(record.car_id) is None:
            raise ConstraintError(f"Carro {record.car_id} inexistente")

    def _present(self, record: SalesOrder) -> SalesOrder:
        client = self.clients.find(record.client_id)
        car = self.cars.find(record.car_id)
        return replace(record, client_name=client.name, car_brand=car.brand, car_model=car.model)
