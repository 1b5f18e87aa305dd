from .fixture_loader import load_fixture, read_fixture

__all__ = [
    "load_fixture",
    "read_fixture",
]
