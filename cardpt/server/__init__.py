"""
cardpt Server - FastAPI HTTP layer over the engine and the decision gateway
"""

from cardpt.server.app import app, create_app

__all__ = ["app", "create_app"]
