"""DataMatch - Rapprochement d'opportunités SharePoint et d'enregistrements clients."""

from datamatch.config import (
    ConfigError,
    ConfigFileError,
    DataMatchError,
    MatchInputError,
    MatchNotFoundError,
    StatusError,
)
from datamatch.io_tables import TableFileError

__all__ = [
    "__version__",
    "DataMatchError",
    "ConfigError",
    "ConfigFileError",
    "MatchInputError",
    "MatchNotFoundError",
    "StatusError",
    "TableFileError",
]

__version__ = "0.1.0"
