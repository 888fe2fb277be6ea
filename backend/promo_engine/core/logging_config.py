import logging


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Настройка логирования для процесса API"""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQL-логи управляются через echo движка
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
