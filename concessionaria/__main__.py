# __main__.py
# Ponto de entrada: python -m concessionaria

import sys

from .config import load_config
from .logger import configure_logging, log_startup
from .web_server import start_server


def main() -> None:
    try:
        config = load_config()
    except ValueError as e:
        print(f"Configuração inválida: {e}", file=sys.stderr)
        sys.exit(2)

    configure_logging(config['log_dir'], config['log_level'])
    log_startup(config)

    if not start_server(config):
        sys.exit(1)


if __name__ == "__main__":
    main()
