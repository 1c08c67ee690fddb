"""
asgi.py -- Application assembly for the ProForwarder admin surface.

This is the ONLY file that imports from both api/ and web/. It joins the JSON
API and the browser login routes into a single ASGI app.

Run with:  uvicorn asgi:app --reload
           python main.py serve
"""

from api.main import app
from web.routes import router as web_router

app.include_router(web_router, tags=["Web UI"])
