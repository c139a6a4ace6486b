"""ASGI entrypoint for the smart fridge API."""

from smart_fridge.api.app import create_app
from smart_fridge.containers import build_container

app = create_app(build_container())
