from .kv_store import StoredBlob

__all__ = ["StoredBlob"]
