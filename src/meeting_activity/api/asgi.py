"""ASGI entrypoint for the meeting activity API."""

from meeting_activity.api.app import create_app
from meeting_activity.containers import build_container

app = create_app(build_container())
