"""Console entry point serving the API with uvicorn."""

import uvicorn

from .core.config import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run("helpdesk.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
