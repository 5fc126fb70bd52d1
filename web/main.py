"""Web application entry point"""

import uvicorn

from config import settings
from utils.logging import configure_logging

if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "web.api:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.LOG_LEVEL.lower()
    )
