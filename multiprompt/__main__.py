"""Run the server: ``python -m multiprompt``."""

import uvicorn

from multiprompt.core.config import settings


def main() -> None:
    uvicorn.run(
        "multiprompt.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug and not settings.is_production,
        log_config=None,  # keep the handlers installed by setup_logging()
    )


if __name__ == "__main__":
    main()
