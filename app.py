"""Hugging Face Spaces entry point."""

from page_replacement.visualization.dash_app import app, main

server = app.server  # expose Flask server for gunicorn fallback

if __name__ == "__main__":
    main()
