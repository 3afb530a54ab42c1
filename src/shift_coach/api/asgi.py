"""ASGI entrypoint for the Shift Coach API."""

from shift_coach.api.app import create_app
from shift_coach.containers import build_container

app = create_app(build_container())
