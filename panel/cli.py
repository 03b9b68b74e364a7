import argparse
import json
import logging
import sys
from io import TextIOWrapper
from pathlib import Path
from typing import Any, Sequence, cast

from pydantic import ValidationError

import config
from cluster.example_data import generate_example_tables
from cluster.pipeline import build_chart_data
from cluster.projector import to_figure
from types_models import DataFrame, FieldConfigSource, PanelOptions


def _read_json(path: str) -> Any:
    """Read a JSON document, exiting with a readable message on failure."""
    file_path = Path(path)
    if not file_path.is_file():
        print(f"❌ Error: File does not exist: {path}")
        sys.exit(1)

    try:
        return json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        print(f"❌ Error: {path} is not valid JSON: {exc}")
        sys.exit(1)


def load_panel_input(
    document: Any,
) -> tuple[list[DataFrame], PanelOptions, FieldConfigSource]:
    """Split an input document into tables, options and field config.

    The document is either a list of tables or an object with ``tables`` and
    optional ``options`` and ``fieldConfig`` keys.
    """
    if isinstance(document, list):
        document = {"tables": document}
    if not isinstance(document, dict):
        raise ValueError("Input must be a list of tables or an object with 'tables'")

    tables = [DataFrame.model_validate(table) for table in document.get("tables", [])]
    options = PanelOptions.model_validate(document.get("options") or {})
    field_config = FieldConfigSource.model_validate(
        document.get("fieldConfig") or document.get("field_config") or {}
    )
    return tables, options, field_config


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point: map tables to chart data and print it as JSON."""
    cast(TextIOWrapper, sys.stdout).reconfigure(encoding="utf-8", errors="replace")

    parser = argparse.ArgumentParser(
        description="Map tabular input to 3D cluster chart data (JSON in, JSON out)"
    )
    _ = parser.add_argument(
        "input",
        nargs="?",
        help="JSON file with a list of tables or {tables, options, fieldConfig}",
    )
    _ = parser.add_argument(
        "--options",
        type=str,
        help="JSON file with panel options; replaces options from the input file",
    )
    _ = parser.add_argument(
        "--figure",
        action="store_true",
        help="Print a plotly-compatible figure instead of the chart data",
    )
    _ = parser.add_argument(
        "--demo",
        action="store_true",
        help="Use generated example tables instead of an input file",
    )
    _ = parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log each pipeline stage.",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.LOG_LEVEL,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.demo and not args.input:
        parser.error("an input file is required unless --demo is given")

    try:
        if args.demo:
            tables = generate_example_tables()
            options, field_config = PanelOptions(), FieldConfigSource()
        else:
            tables, options, field_config = load_panel_input(_read_json(args.input))

        if args.options:
            options = PanelOptions.model_validate(_read_json(args.options))
    except (ValidationError, ValueError) as exc:
        print(f"❌ Error: Invalid panel input: {exc}")
        sys.exit(1)

    chart = build_chart_data(tables, options, field_config)
    if not chart.valid:
        print(f"⚠️  No valid data: {chart.error}", file=sys.stderr)

    if args.figure:
        output: Any = to_figure(chart)
    else:
        output = chart.model_dump(mode="json")

    print(json.dumps(output, indent=2))


__all__ = ["load_panel_input", "main"]
