"""
CLI formatting functions.

JSON and YAML are rendered as-is; tables are drawn with rich for the
collections the CLI knows about and fall back to JSON for anything else.
"""

import json
from typing import Any, Dict, List, Sequence, Tuple

import yaml
from rich.console import Console
from rich.table import Table

TABLE_WIDTH = 120

MACHINE_COLUMNS = (("Name", "name"), ("Address", "address"), ("Driver", "driver"),
                   ("IaaS", "provider_name"), ("Created", "created_at"))
INSTANCE_COLUMNS = (("Name", "name"), ("Kind", "kind"))
HEAL_COLUMNS = (("Healer", "name"), ("Healed", "healed"), ("Error", "error"))


def format_output(data: Any, format_type: str) -> str:
    """Format data according to the specified format type."""
    if format_type == "yaml":
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    if format_type == "table":
        return format_table_output(data)
    return json.dumps(data, indent=2, default=str)


def format_table_output(data: Any) -> str:
    """Format data as a table."""
    if isinstance(data, dict) and "machines" in data:
        rows = [dict(m, driver=m.get("creation_params", {}).get("driver", "")) for m in data["machines"]]
        return render_table(rows, MACHINE_COLUMNS, "No machines found.")
    if isinstance(data, dict) and "instances" in data:
        return render_table(data["instances"], INSTANCE_COLUMNS, "No IaaS configured.")
    if isinstance(data, dict) and "results" in data:
        return render_table(data["results"], HEAL_COLUMNS, "No healers registered.")
    if isinstance(data, dict) and "description" in data:
        return data["description"]
    return json.dumps(data, indent=2, default=str)


def render_table(rows: List[Dict[str, Any]], columns: Sequence[Tuple[str, str]], empty: str) -> str:
    if not rows:
        return empty

    table = Table(show_header=True, header_style="bold magenta")
    for title, _ in columns:
        table.add_column(title)
    for row in rows:
        table.add_row(*(_cell(row.get(key)) for _, key in columns))

    console = Console(width=TABLE_WIDTH, legacy_windows=False, force_terminal=False)
    with console.capture() as capture:
        console.print(table)
    return capture.get()


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
