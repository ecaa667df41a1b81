"""Run the API with uvicorn: ``python -m ballot_api``."""

from __future__ import annotations

import uvicorn

from ballot_api.config import settings


def main() -> None:
    """Serve the application on the configured host and port."""
    uvicorn.run(
        "ballot_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
