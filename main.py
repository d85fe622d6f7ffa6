"""Main entry point for the OSM med spa seeder."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn

from medspa_seeder.agents.seeder_agent import SeederAgent
from medspa_seeder.config.logger import LOG_NAMESPACE, logger
from medspa_seeder.config.models.records import RunResult, RunSuccess
from medspa_seeder.config.settings import OverpassSettings, StorageSettings
from medspa_seeder.orchestration.runner import run_seeder
from medspa_seeder.storage.local import INPUT_KEY, LocalStorage

console = Console()


def parse_args(argv: Optional[list] = None):
    """
    Parse command-line arguments.

    :param argv: Arguments to parse; defaults to sys.argv
    :return: Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Seed a dataset of med-spa-like places from OpenStreetMap",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  python main.py --bbox 29.1 -98.85 29.75 -98.1 --city "San Antonio"
  python main.py --keywords "botox,laser" --storage-dir out
  python main.py --input input.json --strict
        """,
    )

    parser.add_argument(
        "--input",
        help="JSON file with the run input (nested or flat shape)",
        default=None,
    )
    parser.add_argument(
        "--bbox",
        nargs=4,
        metavar=("SOUTH", "WEST", "NORTH", "EAST"),
        help="Bounding box in degrees",
        default=None,
    )
    parser.add_argument(
        "--keywords",
        help="Comma-separated name keywords",
        default=None,
    )
    parser.add_argument(
        "--city",
        help="Fallback city for places without an address city",
        default=None,
    )
    parser.add_argument(
        "--storage-dir",
        help="Directory for the dataset and key-value store",
        default=None,
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail the run when the Overpass payload has no elements list",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args(argv)


def build_input(args, base: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Apply command-line flags over the run input.

    An `--input` file replaces the stored input instead of being merged into it.

    :param args: Parsed arguments
    :param base: Input stored by an earlier run
    :return: The run input in flat or nested shape
    """
    if args.input:
        data: Dict[str, Any] = json.loads(Path(args.input).read_text(encoding="utf-8"))
    else:
        data = dict(base or {})
    if args.bbox:
        south, west, north, east = args.bbox
        data.pop("bbox", None)
        data.update(
            bbox_south=south, bbox_west=west, bbox_north=north, bbox_east=east
        )
    if args.keywords is not None:
        data.pop("keywords", None)
        data["keyword_list"] = args.keywords
    if args.city is not None:
        data["city"] = args.city
    return data


def has_input_flags(args) -> bool:
    return bool(args.input or args.bbox) or args.keywords is not None or args.city is not None


def display_results(result: RunResult, storage: LocalStorage):
    """
    Display the run outcome in a formatted table.

    :param result: The run result
    :param storage: The storage the outputs went to
    """
    status, color = ("completed", "green") if result.success else ("failed", "red")
    console.print(
        Panel(
            f"[bold {color}]{status.upper()}[/bold {color}]",
            title="Seeder Status",
            border_style=color,
        )
    )

    if isinstance(result, RunSuccess):
        summary = result.summary
        table = Table(title="Run Summary", show_header=False)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("City", summary.city)
        table.add_row("Keywords", ", ".join(summary.keywords))
        table.add_row(
            "Bounding box",
            ", ".join(f"{k}={v}" for k, v in summary.bbox.items()),
        )
        table.add_row("Found", str(summary.found))
        table.add_row("Deduplicated", f"[green]{summary.deduped}[/green]")
        table.add_row("Dataset (JSON)", str(storage.dataset_json))
        table.add_row("Dataset (CSV)", str(storage.dataset_csv))
        console.print(table)
        console.print(f"[dim]{summary.hint}[/dim]")
    else:
        console.print(f"[bold red]Error:[/bold red] {result.error.message}")
        console.print(f"[dim]Details stored in {storage.kv_dir / 'ERROR.json'}[/dim]")


def main(argv: Optional[list] = None):
    """
    Main entry point for the seeder.
    """
    args = parse_args(argv)

    if args.verbose:
        logger.enable(LOG_NAMESPACE)
    else:
        logger.disable(LOG_NAMESPACE)

    storage_settings = StorageSettings()
    if args.storage_dir:
        storage_settings = StorageSettings(dir=args.storage_dir)
    storage = LocalStorage(storage_settings)

    overpass_settings = OverpassSettings()
    if args.strict:
        overpass_settings = overpass_settings.model_copy(
            update={"strict_elements": True}
        )

    try:
        if has_input_flags(args):
            base = None if args.input else storage.get_input()
            storage.set_value(INPUT_KEY, build_input(args, base))

        with Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("[cyan]Querying Overpass...", total=None)
            result = run_seeder(
                storage, SeederAgent(overpass_settings=overpass_settings)
            )
            progress.update(task, description="[green]Seeder finished")

        console.print()
        display_results(result, storage)
        sys.exit(0 if result.success else 1)

    except KeyboardInterrupt:
        console.print("\n[yellow]Seeder interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"\n[bold red]Fatal error:[/bold red] {e}")
        if args.verbose:
            console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
