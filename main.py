import logging
import sys

import uvicorn

from app_settings import ConfigurationError, load_app_settings
from config import load_env_file, read_env_var, read_env_var_optional
from gateway import create_app


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)

logger = logging.getLogger(__name__)


def main() -> None:
    load_env_file()
    try:
        app_settings = load_app_settings(read_env_var, read_env_var_optional)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    app = create_app(app_settings)
    logger.info("VR101 AI server on :%s", app_settings.port)
    uvicorn.run(
        app,
        host=app_settings.host,
        port=app_settings.port,
        log_config=None,
        server_header=False,
    )


if __name__ == "__main__":
    main()
