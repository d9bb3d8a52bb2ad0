# backend/wsgi.py
from facturador import create_app

app = create_app()
