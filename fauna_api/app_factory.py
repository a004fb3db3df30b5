"""Entry points for the public and convocatorias FastAPI apps."""
from fauna_api.app import app as public_app, create_app
from fauna_api.convocatorias_app import app as convocatorias_app, create_convocatorias_app

__all__ = ["public_app", "convocatorias_app", "create_app", "create_convocatorias_app"]
