"""Process entry point: logging bootstrap + uvicorn.

Usage:
    usage-monitor            # installed console script
    python server.py         # from the backend/ directory
"""

import logging

import uvicorn

from config import get_config
from api import create_app


def main() -> None:
    cfg = get_config()
    logging.basicConfig(
        level=logging.DEBUG if cfg.debug else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    logger = logging.getLogger("server")
    logger.info(f"Server running on http://{cfg.host}:{cfg.port}")
    uvicorn.run(create_app(cfg), host=cfg.host, port=cfg.port)


if __name__ == "__main__":
    main()
