"""Serverless entrypoint.

Re-exports the application built by ``websiteapi.main.create_app`` so the
serverless runtime serves the same routes and handlers as the standalone
``python -m websiteapi`` server.
"""

from websiteapi.main import app
