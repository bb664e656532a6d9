"""
Run the vault backend with uvicorn.
"""

from __future__ import annotations

import logging

import uvicorn
from pydantic import ValidationError

from vault_backend.app import create_app
from vault_backend.config import get_settings

logger = logging.getLogger(__name__)


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    try:
        settings = get_settings()
    except ValidationError as exc:
        fields = ", ".join(
            str(error["loc"][0]).upper() for error in exc.errors() if error["loc"]
        )
        logger.error(
            "Missing or invalid configuration (%s). CLIENT_ID and CLIENT_SECRET must be set.",
            fields or exc,
        )
        return 1

    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info("Server running on port %d", settings.port)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
