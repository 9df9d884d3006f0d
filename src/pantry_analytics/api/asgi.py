"""ASGI entrypoint for the pantry analytics API."""

from pantry_analytics.api.app import create_app
from pantry_analytics.containers import build_container

app = create_app(build_container())
