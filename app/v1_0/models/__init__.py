from .base import Base
from .supplier import Supplier

__all__ = ["Base", "Supplier"]
