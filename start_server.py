#!/usr/bin/env python3
"""
Startup script for the Task Tracker backend
"""

import logging

import uvicorn

from app.config.settings import settings

logger = logging.getLogger(__name__)

def main():
    logging.basicConfig(level=settings.LOG_LEVEL)
    logger.info(f"Starting Task Tracker on {settings.HOST}:{settings.PORT} (reload={settings.RELOAD})")

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower()
    )

if __name__ == "__main__":
    main()
