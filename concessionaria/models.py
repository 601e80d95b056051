# models.py
# Definições de dataclasses e modelos de domínio

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional
import sqlite3


@dataclass
class Client:
    name: str
    cpf: str
    phone: str
    id: int = 0
    active: bool = True

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Client":
        return cls(
            id=row["id_cliente"],
            name=row["nome"],
            cpf=row["cpf"],
            phone=row["telefone"],
            active=bool(row["situacao"]),
        )

    def to_dto(self) -> Dict[str, Any]:
        return {
            "idCliente": self.id,
            "nome": self.name,
            "cpf": self.cpf,
            "telefone": self.phone,
            "situacao": self.active,
        }


@dataclass
class Car:
    brand: str
    model: str
    year: int
    color: str
    id: int = 0
    active: bool = True

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Car":
        return cls(
            id=row["id_carro"],
            brand=row["marca"],
            model=row["modelo"],
            year=row["ano"],
            color=row["cor"],
            active=bool(row["situacao"]),
        )

    def to_dto(self) -> Dict[str, Any]:
        return {
            "idCarro": self.id,
            "marca": self.brand,
            "modelo": self.model,
            "ano": self.year,
            "cor": self.color,
            "situacao": self.active,
        }


@dataclass
class SalesOrder:
    client_id: int
    car_id: int
    order_date: date
    order_value: float
    id: int = 0
    active: bool = True
    # Campos desnormalizados, preenchidos apenas na leitura
    client_name: Optional[str] = None
    car_brand: Optional[str] = None
    car_model: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "SalesOrder":
        keys = row.keys()
        return cls(
            id=row["id_pedido"],
            client_id=row["id_cliente"],
            car_id=row["id_carro"],
            order_date=date.fromisoformat(str(row["data_pedido"])[:10]),
            order_value=float(row["valor_pedido"]),
            active=bool(row["situacao"]),
            client_name=row["nome_cliente"] if "nome_cliente" in keys else None,
            car_brand=row["marca_carro"] if "marca_carro" in keys else None,
            car_model=row["modelo_carro"] if "modelo_carro" in keys else None,
        )

    def to_dto(self) -> Dict[str, Any]:
        return {
            "idPedido": self.id,
            "idCliente": self.client_id,
            "nomeCliente": self.client_name,
            "idCarro": self.car_id,
            "marcaCarro": self.car_brand,
            "modeloCarro": self.car_model,
            "dataPedido": self.order_date.isoformat(),
            "valorPedido": self.order_value,
            "situacao": self.active,
        }
