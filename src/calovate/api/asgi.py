"""ASGI entrypoint for the calovate API."""

from calovate.api.app import create_app
from calovate.containers import build_container

app = create_app(build_container())
