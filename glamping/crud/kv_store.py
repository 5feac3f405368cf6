# File: glamping/crud/kv_store.py
import json
from typing import Any, Optional
from sqlalchemy.orm import Session
from glamping.models.kv_store import StoredBlob


class KeyValueCRUD:
    def get_blob(self, db: Session, key: str) -> Optional[StoredBlob]:
        return db.query(StoredBlob).filter(StoredBlob.key == key).first()

    def get_value(self, db: Session, key: str) -> Optional[Any]:
        blob = self.get_blob(db, key)
        if not blob:
            return None
        return json.loads(blob.value)

    def set_value(self, db: Session, key: str, value: Any) -> StoredBlob:
        payload = json.dumps(value, ensure_ascii=False, default=str)
        db_blob = self.get_blob(db, key)
        if db_blob:
            db_blob.value = payload
        else:
            db_blob = StoredBlob(key=key, value=payload)
            db.add(db_blob)

        db.commit()
        db.refresh(db_blob)
        return db_blob


kv_store_crud = KeyValueCRUD()
