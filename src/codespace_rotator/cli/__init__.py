from .main import app, app_main, rotate, version_callback


__all__ = [
    "app",
    "app_main",
    "rotate",
    "version_callback",
]
