"""Run the job service: ``python -m computelab``."""

from __future__ import annotations

import uvicorn

from .api import create_app
from .config import Settings, load_env


def main() -> None:
    load_env()
    settings = Settings.from_env()
    app = create_app(settings)
    uvicorn.run(app, host=settings.server.host, port=settings.server.port, log_level=settings.logging.level.lower())


if __name__ == "__main__":
    main()
