from .kv_store import kv_store_crud

__all__ = ["kv_store_crud"]
