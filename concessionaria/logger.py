# logger.py
# Configuração de logging e atalhos de registro

import logging
import os
import sys
from datetime import datetime
from typing import Optional

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'

# Caminho do arquivo de log ativo (definido em configure_logging)
LOG_PATH: Optional[str] = None


def configure_logging(log_dir: str = 'logs', level: str = 'INFO') -> str:
    """
    Configura o logging com um arquivo diário e saída no console.

    Args:
        log_dir: Diretório onde o arquivo de log será criado
        level: Nível mínimo de registro (DEBUG, INFO, WARNING...)

    Returns:
        str: Caminho do arquivo de log
    """
    global LOG_PATH

    os.makedirs(log_dir, exist_ok=True)
    LOG_PATH = os.path.join(log_dir, f'concessionaria_{datetime.now().strftime("%Y%m%d")}.log')

    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # Evita handlers duplicados quando chamado mais de uma vez
    for handler in list(root.handlers):
        if getattr(handler, '_concessionaria', False):
            root.removeHandler(handler)
            handler.close()

    file_handler = logging.FileHandler(LOG_PATH, encoding='utf-8')
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, '%Y-%m-%d %H:%M:%S'))
    file_handler._concessionaria = True  # type: ignore[attr-defined]
    root.addHandler(file_handler)

    # Adiciona também saída no console
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, '%H:%M:%S'))
    console_handler._concessionaria = True  # type: ignore[attr-defined]
    root.addHandler(console_handler)

    return LOG_PATH


def log_event(msg: str):
    """Registra evento informativo"""
    logging.info(msg)


def log_error(msg: str, exc: Exception = None):
    """Registra erro com traceback opcional"""
    if exc:
        logging.error(f"{msg}: {str(exc)}", exc_info=exc)
    else:
        logging.error(msg)


def log_startup(config: dict):
    """Registra informações de inicialização do sistema"""
    logging.info("=" * 60)
    logging.info("CONCESSIONÁRIA - API INICIADA")
    logging.info("=" * 60)
    logging.info(f"Versão Python: {sys.version}")
    logging.info(f"Sistema Operacional: {sys.platform}")
    logging.info(f"Banco de dados: {config.get('database_path')}")
    logging.info(f"Porta: {config.get('server_port')}")
    logging.info(f"Arquivo de log: {LOG_PATH}")
    logging.info("=" * 60)
