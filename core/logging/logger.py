import logging
import sys


def setup_logging(level: str = "INFO"):
    """Configure basic logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(funcName)s - %(lineno)d - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
