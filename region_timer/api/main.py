"""Run the region timer API server."""

import uvicorn

from region_timer.api.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "region_timer.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
