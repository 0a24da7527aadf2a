"""Tool modules. Each exposes an ``OPERATIONS`` table of name -> handler/description."""
from tools import (
    table_api,
    service_desk,
    batch_operations,
    cmdb_reader,
    event_management,
    service_mapping,
    identification,
    scripting,
)

TOOL_MODULES = (
    table_api,
    service_desk,
    batch_operations,
    cmdb_reader,
    event_management,
    service_mapping,
    identification,
    scripting,
)
