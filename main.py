"""Entry point for both services.

Run the address service and the student service as two processes::

    SERVICE_ROLE=address PORT=8081 python main.py
    SERVICE_ROLE=student PORT=8080 ADDRESS_SERVICE_URL=http://localhost:8081 python main.py
"""

import uvicorn

from src.infrastructure.config import get_settings
from src.presentation.api import create_app


app = create_app()


def main() -> None:
    """Run the configured service with uvicorn."""
    settings = get_settings()

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        workers=settings.workers,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
