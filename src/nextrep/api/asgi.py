"""ASGI entrypoint for the NextRep API."""

from nextrep.api.app import create_app
from nextrep.containers import build_container

app = create_app(build_container())
