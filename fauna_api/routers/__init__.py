"""
FastAPI routers grouped por dominio (files, animals, convocatorias, health).

Each file inside this package exposes an APIRouter that the app factories in
app.py / convocatorias_app.py include. Services are looked up on
``request.app.state`` so each app instance owns its own storage paths.
"""
