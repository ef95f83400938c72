from __future__ import annotations

from checkout_api.bootstrap import create_asgi_app

__all__ = ["create_asgi_app"]
