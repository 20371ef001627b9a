# src/allocprep/schemas/records.py
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from allocprep.errors import DataError
from allocprep.schemas.models import RECORD_TYPES, EntityType, Record


def record_type(entity: EntityType | str) -> type[Record]:
    """
    @brief
    Resolve an entity tag ("clients", "workers", "tasks") to its record model.

    @raises
        DataError if the tag is unknown.
    """
    key = entity.value if isinstance(entity, EntityType) else str(entity)
    try:
        return RECORD_TYPES[key]
    except KeyError:
        raise DataError(
            f"Unknown entity type: {entity!r}",
            source="records.record_type",
            suggested_action="Use one of: clients, workers, tasks.",
        ) from None


def to_records(entity: EntityType | str, rows: Iterable[Any]) -> tuple[Record, ...]:
    """
    @brief
    Converts a collection of rows into a tuple of typed records.

    @details
    Accepts record instances of the right type (kept as-is) or mappings keyed
    by column name or attribute name. Plain dicts are rejected as a whole to
    prevent accidental iteration over keys.

    @params
        entity : EntityType | str
            Target collection tag.
        rows : Iterable[Any]
            Records or {column: value} mappings.

    @returns
        Tuple of records in input order.

    @raises
        DataError if a row is neither a record nor a mapping, or names an
        unknown column.
    """
    model = record_type(entity)

    # (1) Reject a plain dict passed as the whole collection
    if isinstance(rows, Mapping):
        raise DataError(
            "Unsupported collection type: mapping.",
            source="records.to_records",
            suggested_action=f"Pass a list of {model.__name__} records or dicts.",
        )

    # (2) Convert row by row, preserving order
    out: list[Record] = []
    for index, row in enumerate(rows):
        if isinstance(row, model):
            out.append(row)
            continue
        if not isinstance(row, Mapping):
            raise DataError(
                f"Row {index} is not a {model.__name__} or mapping: {type(row).__name__}",
                source="records.to_records",
                suggested_action="Provide rows as dicts keyed by column name.",
            )
        try:
            out.append(model.model_validate(dict(row)))
        except ValidationError as e:
            raise DataError(
                f"Row {index} does not fit {model.__name__}: {e}",
                source="records.to_records",
                suggested_action=f"Use the columns: {', '.join(model.columns())}",
            ) from e
    return tuple(out)


__all__ = ["record_type", "to_records"]
