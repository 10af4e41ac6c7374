"""Local control surface for manual confirmation."""

from src.control.server import create_control_app, start_control_server

__all__ = ["create_control_app", "start_control_server"]
