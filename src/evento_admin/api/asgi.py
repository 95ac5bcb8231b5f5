"""ASGI entrypoint for the event admin API."""

from evento_admin.api.app import create_app

app = create_app()
