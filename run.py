import logging

import uvicorn

from booth.config import get_settings
from booth.logging_config import setup_logging
from booth.main import create_app

logger = logging.getLogger("booth")

if __name__ == "__main__":
    setup_logging()
    settings = get_settings()

    logger.info("Starting %s", settings.app_name)
    logger.info("Booth page: http://%s:%s", settings.host, settings.port)
    logger.info("Strips that fail to upload are kept in %s", settings.photos_dir)
    if not settings.upload_url:
        logger.warning("BOOTH_UPLOAD_URL is not set, every strip will be kept locally")

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
