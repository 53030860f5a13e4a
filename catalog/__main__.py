"""Run the server: `python -m catalog` (listens on $PORT, default 3000)."""

import uvicorn

from catalog.config import settings


def main() -> None:
    uvicorn.run(
        "catalog.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
