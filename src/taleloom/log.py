import logging
import sys


def setup_logging(level: str = "INFO"):
    # Story text goes to stdout, so log records go to stderr
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
