# branches/models/__init__.py

from .branch import Branch

__all__ = ["Branch"]
