import logging
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = "info") -> None:
    """Configure root logging. Only "debug" lowers the threshold below INFO."""
    log_level = logging.DEBUG if level == "debug" else logging.INFO
    logging.basicConfig(level=log_level, format=LOG_FORMAT, stream=sys.stdout, force=True)
    # Keep third-party request logs at INFO even in debug mode
    logging.getLogger("httpx").setLevel(logging.INFO)
    logging.getLogger("httpcore").setLevel(logging.INFO)
