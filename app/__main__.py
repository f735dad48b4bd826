from __future__ import annotations

import logging

import uvicorn

from app.logging_config import configure_logging
from app.settings import get_settings

logger = logging.getLogger("user_cache_api")


def main() -> None:
    s = get_settings()
    configure_logging(s.log_level)
    logger.info("server listening on %s:%s", s.host, s.port)
    uvicorn.run("app.main:app", host=s.host, port=s.port, log_level=s.log_level.lower())


if __name__ == "__main__":
    main()
