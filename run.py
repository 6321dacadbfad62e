# =============================================================================
# File: run.py
# Purpose: Entry point for development. Starts the Flask app.
# =============================================================================
# run.py
import logging

from cms import create_app

logging.basicConfig(level=logging.INFO)

app = create_app()

if __name__ == "__main__":
    app.run(debug=True, threaded=True)
