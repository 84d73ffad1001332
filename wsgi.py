# wsgi.py (at repo root), e.g. ``gunicorn wsgi:app``
from mento import create_app

app = create_app()
