"""
HTTP service launcher.
"""

import uvicorn

from niftyscan.core.config import ConfigManager, NiftyScanConfig
from niftyscan.core.logging import configure_logging, logger
from niftyscan.core.services import build_service

from .app import create_app


def serve(config: NiftyScanConfig | None = None) -> None:
    """Start the FastAPI service with uvicorn.

    Raises:
        ConfigurationError: a setting is invalid; raised before the server starts.
    """

    resolved = config or ConfigManager().get_config()
    configure_logging(
        level=resolved.logging.level,
        format=resolved.logging.format,
        file=resolved.logging.file,
    )
    service = build_service(resolved)
    logger.info(f"Server: http://{resolved.server.host}:{resolved.server.port}")
    uvicorn.run(
        create_app(resolved, service),
        host=resolved.server.host,
        port=resolved.server.port,
        log_level=resolved.logging.level.lower(),
    )


if __name__ == "__main__":
    serve()
