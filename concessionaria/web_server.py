"""
Servidor Web Flask da API da Concessionária
============================================
Expõe clientes, carros e pedidos de venda como recursos REST/JSON
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import logging
import sqlite3

from flask import Flask, jsonify, request
from flask_cors import CORS

from .database import Database
from .logger import log_event
from .services import (
    CarService,
    ClientService,
    ConstraintError,
    NotFoundError,
    PersistenceError,
    Repository,
    SalesOrderService,
)
from .validation import ValidationError, parse_car, parse_client, parse_id, parse_order

logger = logging.getLogger(__name__)

MSG_BAD_ID = "ID incorreto"
MSG_BAD_BODY = "Corpo da requisição inválido. Envie um objeto JSON."


@dataclass(frozen=True)
class Resource:
    """Descrição de um recurso exposto pela API"""
    path: str           # segmento da URL (/api/<path>)
    id_key: str         # chave do ID no DTO (idCarro, idCliente...)
    singular: str       # nome usado nas mensagens
    plural: str
    service: Repository
    parser: Callable[..., Any]

    @property
    def title(self) -> str:
        return self.singular.capitalize()


def _message(text: str, status: int, **extra: Any):
    body: Dict[str, Any] = {"mensagem": text}
    body.update(extra)
    return jsonify(body), status


def _server_error(text: str, context: str, exc: Exception):
    """Resposta 500; falhas do banco já foram registradas pelo serviço"""
    if not isinstance(exc, PersistenceError):
        logger.exception(context)
    return _message(text, 500)


class WebServer:
    """Servidor web Flask com as rotas da API"""

    def __init__(
        self,
        clients: Repository,
        cars: Repository,
        orders: Repository,
        port: int = 3333,
        host: str = "0.0.0.0",
        health_check: Optional[Callable[[], bool]] = None,
    ):
        """
        Inicializa o servidor web

        Args:
            clients: Serviço de persistência de clientes
            cars: Serviço de persistência de carros
            orders: Serviço de persistência de pedidos de venda
            port: Porta para o servidor (padrão: 3333)
            host: Interface de rede (padrão: todas)
            health_check: Função que informa se o banco está acessível
        """
        self.port = port
        self.host = host
        self.health_check = health_check or (lambda: True)
        self.resources = (
            Resource("clients", "idCliente", "cliente", "clientes", clients, parse_client),
            Resource("cars", "idCarro", "carro", "carros", cars, parse_car),
            Resource("orders", "idPedido", "pedido", "pedidos", orders, parse_order),
        )
        self.app = Flask(__name__)
        self.app.json.ensure_ascii = False
        CORS(self.app)  # Permite requisições de qualquer origem

        # Configurar rotas
        self._setup_routes()

    def _setup_routes(self):
        """Configura as rotas da API"""

        @self.app.route('/api', methods=['GET'])
        def welcome():
            return _message("Olá, seja bem-vindo!", 200)

        @self.app.route('/api/health', methods=['GET'])
        def health():
            if self.health_check():
                return jsonify({"status": "ok"})
            return jsonify({"status": "indisponivel"}), 503

        for resource in self.resources:
            self._register_resource(resource)

    def _register_resource(self, res: Resource):
        """Registra as cinco rotas (listar, buscar, cadastrar, atualizar, remover) de um recurso"""

        def list_all():
            try:
                records = res.service.list_all()
            except Exception as e:
                return _server_error(
                    f"Não foi possível acessar a lista de {res.plural}.",
                    f"Erro ao consultar {res.plural}",
                    e,
                )
            return jsonify([record.to_dto() for record in records])

        def get_one(raw_id: str):
            record_id = parse_id(raw_id)
            if record_id is None:
                return _message(MSG_BAD_ID, 400)
            try:
                record = res.service.get_by_id(record_id)
            except NotFoundError:
                # Mantém o contrato da API: ID inexistente responde 200 com aviso
                return _message(f"Nenhum {res.singular} encontrado com o ID fornecido.", 200)
            except Exception as e:
                return _server_error(
                    f"Não foi possível acessar a lista de {res.plural}.",
                    f"Erro ao consultar {res.singular} {record_id}",
                    e,
                )
            return jsonify(record.to_dto())

        def create():
            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                return _message(MSG_BAD_BODY, 400)
            try:
                record = res.parser(data)
                new_id = res.service.create(record)
            except ValidationError as e:
                return _message(e.message, 400, campos=e.fields)
            except ConstraintError:
                return _message(f"Erro ao cadastrar {res.singular}.", 400)
            except Exception as e:
                return _server_error(
                    f"Não foi possível inserir o {res.singular}.",
                    f"Erro ao cadastrar {res.singular}",
                    e,
                )
            return _message(f"{res.title} cadastrado com sucesso.", 201, **{res.id_key: new_id})

        def update(raw_id: str):
            record_id = parse_id(raw_id)
            if record_id is None:
                return _message(MSG_BAD_ID, 400)
            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                return _message(MSG_BAD_BODY, 400)
            try:
                record = res.parser(data, record_id)
                res.service.update(record)
            except ValidationError as e:
                return _message(e.message, 400, campos=e.fields)
            except (NotFoundError, ConstraintError):
                return _message(
                    f"Não foi possível atualizar o {res.singular}, "
                    "verifique se as informações foram passadas corretamente.",
                    400,
                )
            except Exception as e:
                return _server_error(
                    f"Não foi possível atualizar o {res.singular}.",
                    f"Erro ao atualizar {res.singular} {record_id}",
                    e,
                )
            return _message(f"{res.title} {record_id} atualizado com sucesso.", 200)

        def remove(raw_id: str):
            record_id = parse_id(raw_id)
            if record_id is None:
                return _message(MSG_BAD_ID, 400)
            try:
                res.service.soft_delete(record_id)
            except NotFoundError:
                return _message(
                    f"Não foi possível remover o {res.singular}, "
                    "verifique se as informações foram passadas corretamente.",
                    400,
                )
            except Exception as e:
                return _server_error(
                    f"Não foi possível remover o {res.singular}.",
                    f"Erro ao remover {res.singular} {record_id}",
                    e,
                )
            return _message(f"{res.title} removido com sucesso.", 200)

        base = f"/api/{res.path}"
        self.app.add_url_rule(base, f"{res.path}_list", list_all, methods=['GET'])
        self.app.add_url_rule(f"{base}/<raw_id>", f"{res.path}_get", get_one, methods=['GET'])
        self.app.add_url_rule(base, f"{res.path}_create", create, methods=['POST'])
        self.app.add_url_rule(f"{base}/<raw_id>", f"{res.path}_update", update, methods=['PUT'])
        self.app.add_url_rule(f"/api/remove/{res.path}/<raw_id>", f"{res.path}_remove", remove, methods=['PUT'])

    def run(self, debug: bool = False):
        """
        Inicia o servidor Flask

        Args:
            debug: Modo debug (padrão: False)
        """
        log_event(f"Endereço do servidor: http://localhost:{self.port}")
        self.app.run(
            host=self.host,
            port=self.port,
            debug=debug,
            threaded=True,
            use_reloader=False
        )


def build_server(db: Database, port: int = 3333, host: str = "0.0.0.0") -> WebServer:
    """Monta o servidor com os serviços SQLite sobre a conexão compartilhada"""
    return WebServer(
        ClientService(db),
        CarService(db),
        SalesOrderService(db),
        port=port,
        host=host,
        health_check=db.test_connection,
    )


def start_server(config: Dict[str, Any]) -> bool:
    """
    Abre o banco, verifica a conexão e inicia o servidor

    Args:
        config: Configuração carregada por load_config()

    Returns:
        bool: False se o banco não estiver acessível
    """
    try:
        db = Database(config['database_path'], seed=bool(config.get('seed_data', False)))
    except sqlite3.Error:
        logger.exception("Erro ao conectar com o banco de dados.")
        return False

    if not db.test_connection():
        logger.error("Erro ao conectar com o banco de dados.")
        db.close()
        return False

    server = build_server(db, port=int(config['server_port']), host=config['server_host'])
    try:
        server.run(debug=bool(config.get('debug', False)))
    finally:
        db.close()
    return True
