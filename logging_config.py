# logging_config.py
import logging
import sys

LOGGER_NAME = "polyline"


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure le logging de l'application (stdout, horodaté).

    Appelé une seule fois par le point d'entrée (app.py). Les modules
    utilisent get_logger() et héritent de cette configuration.
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # Streamlit/tornado sont bavards
    logging.getLogger("tornado").setLevel(logging.WARNING)
    logging.getLogger("watchdog").setLevel(logging.WARNING)

    return logging.getLogger(LOGGER_NAME)


def get_logger(module: str) -> logging.Logger:
    return logging.getLogger(f"{LOGGER_NAME}.{module}")
