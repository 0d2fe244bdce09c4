"""Run the room gateway with uvicorn using the configured host and port."""
from __future__ import annotations

import logging

import uvicorn

from gateway.core.config import settings

logger = logging.getLogger("gateway")


def main() -> None:
	logging.basicConfig(
		level=settings.log_level.upper(),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)
	logger.info("LiveKit backend listening on port %s", settings.port)
	logger.info("LIVEKIT_HOST: %s", settings.livekit_host)
	logger.info("LIVEKIT_API_KEY: %s", settings.livekit_api_key)
	uvicorn.run("gateway.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
	main()
