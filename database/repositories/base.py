from typing import Optional

from sqlalchemy.orm import Session


class BaseRepository:
    """Per-table repository bound to one Session. Subclasses set `model`."""

    model = None

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, entity_id: str) -> Optional[object]:
        return self.db.get(self.model, entity_id)
