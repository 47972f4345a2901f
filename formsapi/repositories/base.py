import datetime
import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

import sqlalchemy
from pydantic import BaseModel

from formsapi.database import Store
from formsapi.errors import ConsistencyFailure, ValidationFailure

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", bound=BaseModel)


def utc_now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def require_id(value: Any, message: str) -> int:
    if not is_positive_int(value):
        raise ValidationFailure(message)
    return value


def require_text(value: Any, message: str) -> str:
    """Return the trimmed string, or fail when it is missing or blank."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailure(message)
    return value.strip()


def optional_text(value: Any, message: str) -> Optional[str]:
    """Trim an optional string; blank and None are both stored as NULL."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationFailure(message)
    return value.strip() or None


def provided(data: BaseModel) -> Dict[str, Any]:
    """Fields the caller actually sent, explicit nulls included."""
    return {name: getattr(data, name) for name in data.model_fields_set}


class Repository(Generic[EntityT]):
    """Single-table data access shared by the entity repositories.

    Subclasses set the table, its key column, the pydantic entity rows are
    turned into and the message used when an id is not a positive integer.
    """

    table: sqlalchemy.Table
    key: str
    entity: Type[EntityT]
    name: str
    id_message: str
    empty_update_message: str = ""

    def __init__(self, store: Store):
        self.store = store

    @property
    def key_column(self) -> sqlalchemy.Column:
        return self.table.c[self.key]

    def to_entity(self, row) -> Optional[EntityT]:
        if row is None:
            return None
        return self.entity(**{column.name: getattr(row, column.name) for column in self.table.columns})

    async def get_by_id(self, entity_id: int) -> Optional[EntityT]:
        require_id(entity_id, self.id_message)
        query = self.table.select().where(self.key_column == entity_id)
        return self.to_entity(await self.store.fetch_one(query))

    async def delete(self, entity_id: int) -> None:
        require_id(entity_id, self.id_message)
        query = self.table.delete().where(self.key_column == entity_id)
        result = await self.store.execute(query)
        logger.debug(f"Deleted {result.rows_affected} {self.name} row(s) with {self.key}={entity_id}")

    async def list_where(self, condition, *order_by) -> List[EntityT]:
        query = self.table.select().where(condition).order_by(*order_by)
        rows = await self.store.fetch_all(query)
        return [self.to_entity(row) for row in rows]

    async def insert(self, values: Dict[str, Any]) -> EntityT:
        query = self.table.insert().values(**values)
        result = await self.store.execute(query)
        logger.debug(f"Inserted {self.name} {self.key}={result.inserted_id}")

        created = None
        if is_positive_int(result.inserted_id):
            created = await self.get_by_id(result.inserted_id)
        if created is None:
            logger.error(
                f"Could not read back {self.name} after insert (inserted_id={result.inserted_id})"
            )
            raise ConsistencyFailure(f"Failed to load {self.name} after creation")
        return created

    async def apply_update(
        self, entity_id: int, changes: Dict[str, Any], touch: Optional[str] = None
    ) -> Optional[EntityT]:
        if not changes:
            raise ValidationFailure(self.empty_update_message or f"No {self.name} fields to update")
        if touch:
            changes = {**changes, touch: utc_now()}
        query = self.table.update().where(self.key_column == entity_id).values(**changes)
        result = await self.store.execute(query)
        logger.debug(
            f"Updated {self.name} {self.key}={entity_id} ({', '.join(changes)}), "
            f"{result.rows_affected} row(s) affected"
        )
        return await self.get_by_id(entity_id)
