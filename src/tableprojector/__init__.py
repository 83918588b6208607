from tableprojector.config.mapping import ColumnMapping, MappingEntry, NumberFormat, default_mapping, load_mapping
from tableprojector.domain.errors import (
    ErrorKind,
    MalformedJsonError,
    ProjectionError,
    UnexpectedShapeError,
    UpstreamFetchError,
)
from tableprojector.domain.table import ColumnDescriptor, TableProjection
from tableprojector.projection.projector import TableProjector, project
from tableprojector.widget import TableController, TableError, TableState

__all__ = [
    "ColumnDescriptor",
    "ColumnMapping",
    "ErrorKind",
    "MalformedJsonError",
    "MappingEntry",
    "NumberFormat",
    "ProjectionError",
    "TableController",
    "TableError",
    "TableProjection",
    "TableProjector",
    "TableState",
    "UnexpectedShapeError",
    "UpstreamFetchError",
    "default_mapping",
    "load_mapping",
    "project",
]
