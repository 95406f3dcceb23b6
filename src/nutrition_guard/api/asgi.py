"""ASGI entrypoint for the nutrition guard API."""

from nutrition_guard.api.app import create_app
from nutrition_guard.containers import build_container

app = create_app(build_container())
