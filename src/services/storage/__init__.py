from .gateway import PersistedUpload, persist_extraction

__all__ = ["PersistedUpload", "persist_extraction"]
