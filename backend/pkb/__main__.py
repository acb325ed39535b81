from __future__ import annotations

import uvicorn

from pkb.config import settings


def main() -> None:
    uvicorn.run(
        "pkb.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
