# validation.py
# Validação e normalização dos dados recebidos pela API

import math
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional

from .models import Car, Client, SalesOrder

CLIENT_FIELDS = ("nome", "cpf", "telefone")
CAR_FIELDS = ("marca", "modelo", "ano", "cor")
ORDER_FIELDS = ("idCliente", "idCarro", "dataPedido", "valorPedido")

_INTEGER_RE = re.compile(r"[0-9]+")

# Limites de um INTEGER do SQLite (64 bits com sinal)
MIN_INTEGER = -(2 ** 63)
MAX_INTEGER = 2 ** 63 - 1

# Formatos de data aceitos além do ISO
_DATE_FORMATS = ("%d/%m/%Y",)


class ValidationError(ValueError):
    """Dados rejeitados antes de chegar ao banco; `fields` lista os campos com problema."""

    def __init__(self, fields: Iterable[str], message: Optional[str] = None):
        self.fields: List[str] = list(fields)
        if message is None:
            message = f"Campos inválidos ou ausentes: {', '.join(self.fields)}."
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self)


def is_blank(value: Any) -> bool:
    """Considera vazio: None ou texto em branco após trim"""
    return value is None or str(value).strip() == ""


def missing_fields(data: Mapping[str, Any], required: Iterable[str]) -> List[str]:
    """Retorna os campos obrigatórios ausentes, nulos ou vazios"""
    return [field for field in required if is_blank(data.get(field))]


def check_required(data: Mapping[str, Any], required: Iterable[str]) -> None:
    """Levanta ValidationError se algum campo obrigatório estiver vazio"""
    missing = missing_fields(data, required)
    if missing:
        raise ValidationError(
            missing,
            f"Os seguintes campos são obrigatórios e não podem estar vazios: {', '.join(missing)}.",
        )


def _parse_integer_text(raw: Any) -> Optional[int]:
    text = str(raw).strip()
    if not _INTEGER_RE.fullmatch(text):
        return None
    try:
        return int(text)
    except ValueError:
        # texto longo demais para int()
        return None


def parse_id(raw: Any) -> Optional[int]:
    """
    Converte um identificador (parâmetro de rota ou campo do corpo) em inteiro positivo.

    Returns:
        int ou None: None quando o valor não é um inteiro maior que zero
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif raw is None:
        return None
    else:
        value = _parse_integer_text(raw)
        if value is None:
            return None
    return value if 0 < value <= MAX_INTEGER else None


def parse_year(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            return None
        value = int(raw)
    else:
        value = _parse_integer_text(raw)
        if value is None:
            return None
    return value if MIN_INTEGER <= value <= MAX_INTEGER else None


def parse_date(raw: Any) -> Optional[date]:
    """
    Converte a data do pedido em datetime.date.

    Aceita objetos date/datetime, ISO (2024-05-01, 2024-05-01T10:00:00Z)
    e o formato brasileiro DD/MM/AAAA. Retorna None para datas inválidas.
    """
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = str(raw).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_value(raw: Any) -> Optional[float]:
    """
    Normaliza o valor do pedido.

    Números são usados diretamente; textos têm a primeira vírgula trocada
    por ponto ("1500,50" -> 1500.5). Retorna None se o resultado não for
    finito ou não for maior que zero.
    """
    if isinstance(raw, bool):
        return None
    try:
        if isinstance(raw, (int, float, Decimal)):
            value = float(raw)
        else:
            value = float(str(raw).replace(",", ".", 1))
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def parse_client(data: Mapping[str, Any], client_id: int = 0) -> Client:
    check_required(data, CLIENT_FIELDS)
    return Client(
        id=client_id,
        name=str(data["nome"]).strip(),
        cpf=str(data["cpf"]).strip(),
        phone=str(data["telefone"]).strip(),
    )


def parse_car(data: Mapping[str, Any], car_id: int = 0) -> Car:
    check_required(data, CAR_FIELDS)
    year = parse_year(data["ano"])
    if year is None:
        raise ValidationError(["ano"])
    return Car(
        id=car_id,
        brand=str(data["marca"]).strip(),
        model=str(data["modelo"]).strip(),
        year=year,
        color=str(data["cor"]).strip(),
    )


def parse_order(data: Mapping[str, Any], order_id: int = 0) -> SalesOrder:
    """
    Valida o corpo de um pedido de venda e devolve o pedido normalizado.

    Todos os campos são verificados antes de rejeitar, para que a resposta
    liste de uma vez todos os campos ausentes ou inválidos.

    Raises:
        ValidationError: com a lista de campos problemáticos
    """
    invalid = set(missing_fields(data, ORDER_FIELDS))

    client_id = car_id = None
    if "idCliente" not in invalid:
        client_id = parse_id(data["idCliente"])
        if client_id is None:
            invalid.add("idCliente")
    if "idCarro" not in invalid:
        car_id = parse_id(data["idCarro"])
        if car_id is None:
            invalid.add("idCarro")

    order_date = None
    if "dataPedido" not in invalid:
        order_date = parse_date(data["dataPedido"])
        if order_date is None:
            invalid.add("dataPedido")

    order_value = None
    if "valorPedido" not in invalid:
        order_value = parse_value(data["valorPedido"])
        if order_value is None:
            invalid.add("valorPedido")

    if invalid:
        raise ValidationError([field for field in ORDER_FIELDS if field in invalid])

    return SalesOrder(
        id=order_id,
        client_id=client_id,
        car_id=car_id,
        order_date=order_date,
        order_value=order_value,
    )
