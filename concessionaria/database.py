# database.py
# Responsável pela conexão e operações com o banco de dados SQLite

import sqlite3
import threading
from typing import Any, List, Tuple, Union, Mapping

from .logger import log_event, log_error

# Parameter type accepted by sqlite3 (positional tuple or named mapping)
Params = Union[Tuple[Any, ...], Mapping[str, Any]]

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS clientes (
        id_cliente INTEGER PRIMARY KEY AUTOINCREMENT,
        nome VARCHAR(50) NOT NULL,
        cpf VARCHAR(11) UNIQUE NOT NULL,
        telefone VARCHAR(16),
        situacao BOOLEAN NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS carros (
        id_carro INTEGER PRIMARY KEY AUTOINCREMENT,
        marca VARCHAR(50) NOT NULL,
        modelo VARCHAR(50) NOT NULL,
        ano INT,
        cor VARCHAR(20),
        situacao BOOLEAN NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS pedidos_venda (
        id_pedido INTEGER PRIMARY KEY AUTOINCREMENT,
        id_cliente INT NOT NULL,
        id_carro INT NOT NULL,
        data_pedido DATE NOT NULL,
        valor_pedido DECIMAL(10,2) NOT NULL CHECK (valor_pedido > 0),
        situacao BOOLEAN NOT NULL DEFAULT 1,
        FOREIGN KEY (id_cliente) REFERENCES clientes(id_cliente),
        FOREIGN KEY (id_carro) REFERENCES carros(id_carro)
    )
    """,
)

SEED_CLIENTS = [
    ('JOÃO SILVA', '12345678901', '11912345678'),
    ('MARIA OLIVEIRA', '23456789012', '21912345678'),
    ('CARLOS SOUZA', '34567890123', '31912345678'),
    ('ANA SANTOS', '45678901234', '41912345678'),
    ('PAULO LIMA', '56789012345', '51912345678'),
]

SEED_CARS = [
    ('TOYOTA', 'COROLLA', 2020, 'PRETO'),
    ('HONDA', 'CIVIC', 2019, 'BRANCO'),
    ('FORD', 'FIESTA', 2018, 'VERMELHO'),
    ('CHEVROLET', 'ONIX', 2021, 'AZUL'),
    ('VOLKSWAGEN', 'GOL', 2022, 'CINZA'),
]

SEED_ORDERS = [
    (1, 5, '2023-09-10', 75000.00),
    (2, 4, '2023-08-15', 68000.00),
    (3, 3, '2023-07-20', 45000.00),
    (4, 2, '2023-06-25', 78000.00),
    (5, 1, '2023-05-30', 53000.00),
]


class Database:
    """
    Conexão compartilhada com o banco de dados.

    Uma única conexão atende todas as requisições; cada comando é executado
    sob um lock, sem transações de múltiplos comandos.
    """

    def __init__(self, db_path: str, seed: bool = False):
        self.db_path = db_path
        self._lock = threading.RLock()
        # check_same_thread=False permite uso pelas threads do servidor Flask
        # timeout define quanto esperar em locks antes de falhar
        self.conn = sqlite3.connect(self.db_path, timeout=10, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        c = self.conn.cursor()
        c.execute("PRAGMA foreign_keys=ON")
        if db_path != ':memory:':
            c.execute("PRAGMA journal_mode=WAL")  # leitores não bloqueiam escritor
            c.execute("PRAGMA busy_timeout=5000")  # 5s de espera em lock
        self.conn.commit()
        self._init_db(seed)

    def _init_db(self, seed: bool) -> None:
        with self._lock:
            cur = self.conn.cursor()
            for statement in SCHEMA:
                cur.execute(statement)
            self.conn.commit()

            if seed and cur.execute("SELECT COUNT(*) FROM clientes").fetchone()[0] == 0:
                cur.executemany("INSERT INTO clientes (nome, cpf, telefone) VALUES (?,?,?)", SEED_CLIENTS)
                cur.executemany("INSERT INTO carros (marca, modelo, ano, cor) VALUES (?,?,?,?)", SEED_CARS)
                cur.executemany(
                    "INSERT INTO pedidos_venda (id_cliente, id_carro, data_pedido, valor_pedido) VALUES (?,?,?,?)",
                    SEED_ORDERS,
                )
                self.conn.commit()
                log_event(f"Dados iniciais inseridos em {self.db_path}")

    def execute(self, sql: str, params: Params = ()) -> sqlite3.Cursor:
        with self._lock:
            cur = self.conn.cursor()
            try:
                cur.execute(sql, params)
                self.conn.commit()
            except sqlite3.Error:
                self.conn.rollback()
                raise
            return cur

    def query(self, sql: str, params: Params = ()) -> List[sqlite3.Row]:
        with self._lock:
            cur = self.conn.cursor()
            try:
                cur.execute(sql, params)
                return cur.fetchall()
            except sqlite3.DatabaseError as e:
                if "malformed" in str(e).lower() or "corrupt" in str(e).lower():
                    raise sqlite3.DatabaseError(f"Banco de dados corrompido: {e}") from e
                raise

    def test_connection(self) -> bool:
        """Verifica se o banco responde a uma consulta simples"""
        try:
            row = self.query("SELECT 1")
            return bool(row) and row[0][0] == 1
        except sqlite3.Error as e:
            log_error("Erro ao conectar com o banco de dados", e)
            return False

    def close(self) -> None:
        with self._lock:
            self.conn.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
