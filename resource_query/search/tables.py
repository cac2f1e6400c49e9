"""Table descriptors: the explicit name -> column map the engine queries through."""
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from sqlalchemy import Column, Table, inspect

from resource_query.core.exceptions import AccessError


@dataclass(frozen=True)
class TableDescriptor:
    """
    A queryable table plus the logical field names it exposes.

    Built once per table, typically at import time next to the model. The
    engine never resolves a field by attribute lookup on a model; it only
    reads this map.
    """
    table: Table
    columns: Mapping[str, Column] = field(repr=False)
    soft_delete_column: str | None = None

    @classmethod
    def from_table(
        cls,
        table_or_model: Any,
        soft_delete_column: str | None = "deleted_at",
    ) -> "TableDescriptor":
        """
        Describe a Core ``Table`` or a declarative model class.

        ``soft_delete_column`` is kept only when the table really has it.
        """
        table = table_or_model if isinstance(table_or_model, Table) else inspect(table_or_model).local_table
        columns = {column.key: column for column in table.columns}
        if soft_delete_column not in columns:
            soft_delete_column = None
        return cls(
            table=table,
            columns=MappingProxyType(columns),
            soft_delete_column=soft_delete_column,
        )

    @property
    def name(self) -> str:
        return self.table.name

    @property
    def soft_delete(self) -> Column | None:
        if self.soft_delete_column is None:
            return None
        return self.columns[self.soft_delete_column]

    def has(self, name: str) -> bool:
        return name in self.columns

    def column(self, name: str) -> Column:
        try:
            return self.columns[name]
        except KeyError:
            raise AccessError(
                f"Field does not exist in table: {name}",
                details={"field": name, "table": self.name},
            ) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self.columns)
