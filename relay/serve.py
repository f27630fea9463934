# relay/serve.py
"""Run the relay under uvicorn: python -m relay.serve"""
import os

import uvicorn
from dotenv import load_dotenv, find_dotenv

from relay.config import Settings


def main() -> int:
    # .env must be loaded before settings are read; uvicorn imports relay.app only later
    load_dotenv(find_dotenv(usecwd=True))
    settings = Settings.from_env()
    uvicorn.run(
        "relay.app:app",
        host=settings.host,
        port=settings.port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
