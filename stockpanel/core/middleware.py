from fastapi import FastAPI
import time
import logging

logger = logging.getLogger(__name__)

def setup_middleware(app: FastAPI):
    """Request logging for every HTTP call."""

    @app.middleware("http")
    async def log_requests(request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )

        return response
