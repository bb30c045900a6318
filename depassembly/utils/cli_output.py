"""CLI JSON output wrapper.

Every ``--json`` payload carries the same metadata header (schema_id,
schema_version, producer, produced_at) so downstream tooling can detect
the output type and version.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from depassembly import __version__


def json_response(
    schema_id: str,
    schema_version: int,
    **data: Any,
) -> str:
    """Create schema-wrapped JSON response for CLI output.

    Args:
        schema_id: Identifier for the output type (e.g., "assembly_report").
        schema_version: Integer version for backward compatibility.
        **data: Payload data to include in the response.

    Returns:
        JSON string with schema metadata and payload.

    Example:
        >>> json_response("resolution", 1, project="g:a:jar:1.0", rules=[])
        {
          "schema_id": "resolution",
          "schema_version": 1,
          "producer": "depassembly-0.1.0",
          "produced_at": "2026-10-19T10:30:00+00:00",
          "project": "g:a:jar:1.0",
          "rules": []
        }
    """
    wrapped = {
        "schema_id": schema_id,
        "schema_version": schema_version,
        "producer": f"depassembly-{__version__}",
        "produced_at": datetime.now(UTC).isoformat(),
        **data,
    }
    return json.dumps(wrapped, indent=2, default=str)
