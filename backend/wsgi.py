# backend/wsgi.py
from pvz import create_app

app = create_app()
