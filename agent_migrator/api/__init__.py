"""HTTP API for the migrator.

Serve with ``uvicorn --factory agent_migrator.api.main:create_app``.
"""

from .main import create_app

__all__ = ["create_app"]
