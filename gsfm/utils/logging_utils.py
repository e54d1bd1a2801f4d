import logging

_DEFAULT_FMT = "[%(levelname)s] %(name)s: %(message)s"


def make_logger(name: str = "gsfm", level: int = logging.INFO, fmt: str = _DEFAULT_FMT) -> logging.Logger:
    """Logger with a single stream handler; calling again only updates the level."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(fmt))
        logger.addHandler(h)
    logger.setLevel(level)
    return logger

