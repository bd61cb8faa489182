"""
FastAPI routers grouped by domain (auth, offers, account).

Each module exposes an APIRouter included by ``troq.app.create_app``. Routers
pull their services from ``request.app.state`` and translate service/storage
errors into HTTP responses.
"""
