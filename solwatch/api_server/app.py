"""
ASGI application entrypoint.

Run with: uvicorn solwatch.api_server.app:app --host 0.0.0.0 --port 3000
or: python -m solwatch.api_server.app
"""

import uvicorn

from solwatch.api_server.server import app
from solwatch.config import get_settings

__all__ = ["app"]


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
