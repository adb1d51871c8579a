"""Role/permission authorization engine service package."""


def __getattr__(name):
    """Lazy import so the models and services can be used without FastAPI."""
    if name == "create_app":
        from .main import create_app
        return create_app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
