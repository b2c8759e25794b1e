"""
enqoy.api.__main__ — Entry point for ``python -m enqoy.api``
=============================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Create the SQLAlchemy engine and ensure tables exist.
4. Serve the FastAPI app with uvicorn on ``dashboard_port``.
"""

from __future__ import annotations

import logging

import uvicorn
from dotenv import load_dotenv

from enqoy.config import load_config
from enqoy.database.engine import create_db_engine, init_db

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("enqoy")


def main() -> None:
    """Bootstrap and run the pairing API."""
    load_dotenv()

    cfg = load_config()
    logger.info("Config loaded — community: %s, main city: %s", cfg.community_name, cfg.main_city)

    engine = create_db_engine()
    init_db(engine)

    uvicorn.run("enqoy.api.main:app", host="0.0.0.0", port=cfg.dashboard_port)


if __name__ == "__main__":
    main()
