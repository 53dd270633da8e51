"""Run the signaling server with uvicorn."""
from __future__ import annotations

import logging

import uvicorn

from .core.config import Settings, get_settings
from .core.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _ssl_options(settings: Settings) -> dict[str, str]:
    """Return uvicorn TLS options, or nothing when the material is missing or unreadable."""

    if not settings.ssl_enabled:
        return {}
    try:
        for path in (settings.ssl_cert_file, settings.ssl_key_file):
            with open(path, "rb") as handle:
                handle.read(1)
    except OSError as exc:
        logger.warning("Failed to load SSL cert/key, falling back to HTTP: %s", exc)
        return {}
    return {"ssl_certfile": settings.ssl_cert_file, "ssl_keyfile": settings.ssl_key_file}


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    ssl_options = _ssl_options(settings)
    scheme = "https" if ssl_options else "http"
    logger.info("Signaling server listening on %s://%s:%s", scheme, settings.host, settings.port)

    uvicorn.run(
        "watchparty_signaling.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        **ssl_options,
    )


if __name__ == "__main__":
    main()
