"""CSV import/export and JSON backup/restore."""

from rentbook.interchange.backup import (
    PortfolioSnapshot,
    export_snapshot,
    restore_snapshot,
    snapshot_to_json,
)
from rentbook.interchange.csv_io import (
    ImportResult,
    export_table,
    import_properties,
    import_tenants,
    parse_date,
)

__all__ = [
    "ImportResult",
    "PortfolioSnapshot",
    "export_snapshot",
    "export_table",
    "import_properties",
    "import_tenants",
    "parse_date",
    "restore_snapshot",
    "snapshot_to_json",
]
