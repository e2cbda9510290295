#!/usr/bin/env python3
"""
FlowList Server - HTTP launcher
Runs the FastAPI app (REST routes + assistant chat) under uvicorn
"""
import logging
import sys

import uvicorn

from flowlist.config import settings

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    logger.info("Starting FlowList server...")
    logger.info(f"Python {sys.version}, encoding={sys.getdefaultencoding()}")
    logger.info(f"HTTP server will run on http://{settings.http_host}:{settings.http_port}")
    uvicorn.run(
        "flowlist.main:app",
        host=settings.http_host,
        port=settings.http_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
