"""ASGI entrypoint for the pantry client sign-in surface."""

from pantry_client.api.app import create_app
from pantry_client.containers import build_container

app = create_app(build_container())
