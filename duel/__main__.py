import logging

from .server import main

logging.basicConfig(level=logging.INFO)


if __name__ == "__main__":
    main()
