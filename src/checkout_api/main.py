from __future__ import annotations

import uvicorn

from checkout_api.config import Settings


def main() -> None:
    settings = Settings.from_env()
    uvicorn.run(
        "checkout_api.asgi:create_asgi_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
