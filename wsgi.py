"""WSGI entry point: ``gunicorn wsgi:app``."""
import logging
import os

from portfolio_app import create_app

app = create_app()

if __name__ == "__main__":  # pragma: no cover - local development only
    port = int(os.getenv("PORT", "5000"))
    logging.getLogger(__name__).info("starting development server on port %s", port)
    app.run(host="0.0.0.0", port=port)
