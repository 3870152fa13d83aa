import logging


def get_logger(name: str = "cachesim", level=logging.INFO):
    logging.basicConfig(level=level, format="%(levelname)s %(message)s")
    return logging.getLogger(name)
