# config.py
# Configurações globais: leitura de YAML com sobrescrita por variáveis de ambiente

from typing import Dict, Any, Mapping, Optional
import yaml
import os

# Arquivo de configuração padrão (diretório atual)
DEFAULT_CONFIG_PATH = 'config.yaml'

# Valores usados quando nem o YAML nem o ambiente definem a chave
DEFAULTS: Dict[str, Any] = {
    'server_host': '0.0.0.0',
    'server_port': 3333,
    'database_path': 'concessionaria.db',
    'seed_data': True,
    'log_dir': 'logs',
    'log_level': 'INFO',
    'debug': False,
}

# Variável de ambiente -> (chave da configuração, tipo)
_ENV_OVERRIDES = {
    'SERVER_HOST': ('server_host', str),
    'SERVER_PORT': ('server_port', int),
    'DATABASE_PATH': ('database_path', str),
    'SEED_DATA': ('seed_data', bool),
    'LOG_DIR': ('log_dir', str),
    'LOG_LEVEL': ('log_level', str),
    'FLASK_DEBUG': ('debug', bool),
}

_TRUE_VALUES = ('1', 'true', 'yes', 'sim', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'nao', 'não', 'off', '')


def get_config_path(path: Optional[str] = None) -> str:
    """
    Retorna o caminho do arquivo de configuração.

    Procura em ordem de prioridade:
    1. Caminho informado explicitamente
    2. Variável de ambiente CONCESSIONARIA_CONFIG
    3. config.yaml no diretório atual
    """
    if path:
        return path
    return os.environ.get('CONCESSIONARIA_CONFIG', DEFAULT_CONFIG_PATH)


def _to_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Valor booleano inválido para {name}: {raw!r}")


def _convert(name: str, raw: str, kind: type) -> Any:
    if kind is bool:
        return _to_bool(name, raw)
    if kind is int:
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"Valor numérico inválido para {name}: {raw!r}") from None
    return raw


def load_config(path: Optional[str] = None,
                environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Carrega as configurações do arquivo YAML e aplica as variáveis de ambiente.

    Args:
        path: Caminho do arquivo YAML (opcional)
        environ: Mapeamento de variáveis de ambiente (padrão: os.environ)

    Returns:
        Dict[str, Any]: Dicionário com as configurações já completas

    Raises:
        ValueError: Se uma variável de ambiente tiver valor incompatível
    """
    config: Dict[str, Any] = dict(DEFAULTS)

    config_path = get_config_path(path)
    if os.path.exists(config_path):
        with open(config_path, 'r', encoding='utf-8') as f:
            config.update(yaml.safe_load(f) or {})

    env = os.environ if environ is None else environ
    for name, (key, kind) in _ENV_OVERRIDES.items():
        if name in env:
            config[key] = _convert(name, env[name], kind)

    return config

