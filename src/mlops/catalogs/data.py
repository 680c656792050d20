from __future__ import annotations

from typing import Any, Optional, Union
from uuid import UUID

from pandas.api import types as ptypes

from mlops.catalogs.validation import require_id
from mlops.entities import DataColumn, DataSchema
from mlops.errors import ValidationError
from mlops.storage.types import MetadataStore


def column_type_label(dtype: Any) -> str:
    """Map a pandas/numpy dtype to the logical type label stored for a column."""
    if ptypes.is_bool_dtype(dtype):
        return "Boolean"
    if ptypes.is_integer_dtype(dtype):
        return "Integer"
    if ptypes.is_float_dtype(dtype):
        return "Float"
    if ptypes.is_datetime64_any_dtype(dtype):
        return "DateTime"
    if ptypes.is_timedelta64_dtype(dtype):
        return "TimeSpan"
    if isinstance(dtype, ptypes.CategoricalDtype):
        return "Category"
    if ptypes.is_string_dtype(dtype) or ptypes.is_object_dtype(dtype):
        return "String"
    return str(dtype)


def schema_from_frame(frame: Any) -> DataSchema:
    """Describe the columns of a pandas ``DataFrame`` (or anything with ``.dtypes``)."""
    dtypes = getattr(frame, "dtypes", None)
    if dtypes is None or not hasattr(dtypes, "items"):
        raise ValidationError(f"expected a tabular data frame, got {type(frame).__name__}")
    columns = tuple(DataColumn(name=str(name), type=column_type_label(dtype)) for name, dtype in dtypes.items())
    return DataSchema(column_count=len(columns), columns=columns)


class DataCatalog:
    """Record the shape of the data a run was trained on."""

    def __init__(self, metadata_store: MetadataStore) -> None:
        self._metadata_store = metadata_store

    def log_data(self, run_id: Union[UUID, str], data: Any) -> DataSchema:
        """Persist the column schema of ``data`` for the run, replacing any previous schema."""
        rid = require_id(run_id)
        schema = data if isinstance(data, DataSchema) else schema_from_frame(data)
        self._metadata_store.log_data_schema(rid, schema)
        return schema

    def get_data(self, run_id: Union[UUID, str]) -> Optional[DataSchema]:
        return self._metadata_store.get_data_schema(require_id(run_id))
