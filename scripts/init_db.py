import argparse
import logging
import os
import sys

# Add current directory to path
sys.path.append(os.getcwd())

from frame.core.logging import configure_logging
from frame.db.init_db import init_db
from frame.db.session import engine

logger = logging.getLogger("init_db")


def main():
    parser = argparse.ArgumentParser(description="Create the Frame tables")
    parser.add_argument("--seed", action="store_true", help="Also create the demo organization")
    args = parser.parse_args()

    configure_logging()
    logger.info("--- Database Initialisation ---")
    init_db(engine, seed=args.seed)
    if args.seed:
        logger.info("Demo users: owner@demo.com, manager@demo.com, designer@demo.com")
    logger.info("Done")


if __name__ == "__main__":
    main()
