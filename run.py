#!/usr/bin/env python3
"""Development entry point: ``python run.py`` or ``flask --app run import-csv ...``."""
import os

from app import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=os.environ.get('FLASK_DEBUG') == '1')
