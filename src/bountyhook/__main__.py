"""Run the bountyhook relay: ``python -m bountyhook``."""

import uvicorn

from bountyhook.api import create_app
from bountyhook.config import Settings


def main() -> None:
    """Start the management API and poller under uvicorn."""
    settings = Settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
