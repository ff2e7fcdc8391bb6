#!/usr/bin/env python3
"""
Inventory API startup script.
Runs the FastAPI app under uvicorn; Ctrl+C / SIGTERM trigger a graceful
shutdown that closes the database connections.
"""

import logging
import os

import uvicorn

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    port = int(os.getenv("PORT", "3000"))

    logger.info("Starting Inventory API...")
    logger.info("Available endpoints:")
    logger.info("  - GET    /products")
    logger.info("  - GET    /products/metrics")
    logger.info("  - GET    /products/{id}")
    logger.info("  - POST   /products")
    logger.info("  - PUT    /products/{id}")
    logger.info("  - DELETE /products/{id}")
    logger.info("  - GET    /health")
    logger.info(f"  - API Docs: http://localhost:{port}/docs")

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=port,
        log_level="info"
    )
