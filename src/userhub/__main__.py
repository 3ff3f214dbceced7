"""Run the HTTP server: ``python -m src.userhub``."""

from __future__ import annotations

import uvicorn

from .config import load_config
from .main import create_app


def main() -> None:
    config = load_config()
    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)


if __name__ == "__main__":
    main()
