"""Initialize the userhub database schema."""

import structlog

from src.userhub.config import load_config
from src.userhub.logging import configure_logging

logger = structlog.get_logger(__name__)


def main() -> None:
    config = load_config()
    configure_logging(config.log_level)
    logger.info("db.initialized", database_url=config.engine.url.render_as_string(hide_password=True))
    config.engine.dispose()


if __name__ == "__main__":
    main()
