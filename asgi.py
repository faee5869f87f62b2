"""
asgi.py -- Process-wide application instance.

Builds the app from the environment (get_settings()). Kept out of api/main.py
so importing create_app() in tests never reads the host environment or .env.

Run with:  uvicorn asgi:app --reload
"""

from api.main import create_app

app = create_app()
