from .contacts import ContactStore
from .memory import InMemoryContactStore

__all__ = ["ContactStore", "InMemoryContactStore"]
