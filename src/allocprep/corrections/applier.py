# src/allocprep/corrections/applier.py
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from allocprep.errors import DataError
from allocprep.schemas.models import EntityType, Record
from allocprep.schemas.records import record_type, to_records

logger = logging.getLogger(__name__)


def apply_correction(
    entity: EntityType | str,
    row_index: int,
    field: str,
    new_value: Any,
    collection: Iterable[Record | dict[str, Any]],
) -> tuple[Record, ...]:
    """
    @brief
    Replaces one cell of one row and returns the new collection.

    @details
    The input collection is never modified: the result is a new tuple in
    which only `row_index` holds a new record, whose `field` equals
    `new_value` (after the usual cell coercion). No validation happens here;
    a bad value simply yields a still-invalid collection that the next
    validation pass reports again.

    @params
        entity : EntityType | str
            Owning collection tag ("clients", "workers", "tasks").
        row_index : int
            Zero-based row position.
        field : str
            Column name (e.g. "Duration") or attribute name (e.g. "duration").
        new_value : Any
            Replacement cell value.
        collection : Iterable[Record | dict]
            Current rows of that collection.

    @returns
        New tuple of records.

    @raises
        DataError if the row index is out of bounds or the field is unknown.
    """
    # (1) Resolve model and target attribute
    model = record_type(entity)
    attribute = model.attribute_for(field)
    if attribute is None:
        raise DataError(
            f"Unknown field {field!r} for {model.__name__}",
            source="corrections.apply_correction",
            suggested_action=f"Use one of: {', '.join(model.columns())}",
        )

    # (2) Bounds check on the current collection
    rows = to_records(entity, collection)
    if isinstance(row_index, bool) or not isinstance(row_index, int):
        raise DataError(
            f"Row index must be an integer, got {type(row_index).__name__}",
            source="corrections.apply_correction",
        )
    if not 0 <= row_index < len(rows):
        raise DataError(
            f"Row index {row_index} out of bounds for {len(rows)} row(s)",
            source="corrections.apply_correction",
            suggested_action="Re-run validation; the collection may have changed.",
        )

    # (3) Rebuild the target row through the model so cell coercion applies
    target = rows[row_index]
    updated = model.model_validate({**target.model_dump(), attribute: new_value})

    logger.debug(
        "Correction applied: %s[%d].%s = %r", model.ENTITY.value, row_index, field, new_value
    )
    return rows[:row_index] + (updated,) + rows[row_index + 1 :]


__all__ = ["apply_correction"]
