"""
LinkView CLI
============

Render one linked view of a diagnostics data directory.

    linkview ~/data/plant_7 --list
    linkview ~/data/plant_7 --view anomalies --start "2024-01-01 10:00" --end "2024-01-01 10:05"
    linkview ~/data/plant_7 --view granger --sort -o granger.png
    linkview ~/data/plant_7 --view cointegration --search 12
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from .anomaly import AnomalyCategory, SortOrder
from .config import load_config
from .errors import LinkViewError
from .loader import DatasetLoader
from .surface import MatplotlibSurface
from .workspace import MATRIX_VIEWS, VIEW_NAMES, Workspace


def _parse_time(text: str) -> datetime:
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO timestamp: {text!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='linkview',
        description='LinkView - linked time-series diagnostics views',
    )
    parser.add_argument(
        'data_dir',
        nargs='?',
        help='Directory containing the diagnostics CSV files (or LINKVIEW_DATA_DIR)'
    )
    parser.add_argument(
        '-c', '--config',
        help='YAML file with configuration overrides'
    )
    parser.add_argument(
        '--view',
        choices=VIEW_NAMES,
        default='timeseries',
        help='View to render (default: timeseries)'
    )
    parser.add_argument(
        '--start',
        type=_parse_time,
        help='Brush start (ISO timestamp)'
    )
    parser.add_argument(
        '--end',
        type=_parse_time,
        help='Brush end (ISO timestamp)'
    )
    parser.add_argument(
        '--sort',
        action='store_true',
        help='Sort a matrix view by significance'
    )
    parser.add_argument(
        '--anomaly-sort',
        choices=[o.value for o in SortOrder],
        default=SortOrder.ORIGINAL.value,
        help='Bar order for the anomalies view (default: original)'
    )
    parser.add_argument(
        '--search',
        help='Field index to highlight in the dictionary panel'
    )
    parser.add_argument(
        '-o', '--output',
        help='Output file path (png, pdf, svg)'
    )
    parser.add_argument(
        '--list',
        action='store_true',
        help='List the field dictionary and exit'
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    config = load_config(args.config, data_dir=args.data_dir)
    logging.basicConfig(
        level=getattr(logging, str(config.log_level).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    if config.data_dir is None:
        print("Error: no data directory given (argument or LINKVIEW_DATA_DIR)")
        sys.exit(1)
    if not Path(config.data_dir).exists():
        print(f"Error: {config.data_dir} does not exist")
        sys.exit(1)

    print(f"Loading from {config.data_dir}...")
    surface = MatplotlibSurface()

    try:
        dataset = DatasetLoader(config).load()
        workspace = Workspace(dataset, config, surface)

        if args.list:
            print(f"\nFields ({len(workspace.dictionary)}):")
            for index, name in workspace.dictionary.items():
                print(f"  {index}: {name}")
            return

        if args.start is not None or args.end is not None:
            workspace.brush.set(args.start, args.end)
        print(f"Selected Time: {workspace.brush.describe()}")

        workspace.select(args.view)

        if args.view == 'anomalies':
            order = SortOrder(args.anomaly_sort)
            for category in AnomalyCategory:
                workspace.bar_charts.sort(category, order)
            counts = workspace.aggregator.counts
            print(f"  Zero Value events:   {counts.total(AnomalyCategory.ZERO_VALUE)}")
            print(f"  Sharp Change events: {counts.total(AnomalyCategory.SHARP_CHANGE)}")

        if args.view in MATRIX_VIEWS:
            view = workspace.matrix(args.view)
            if args.sort:
                view.sort()
            summary = view.model.field_counts_summary()
            print(f"\n{view.model.semantics.title}: {len(view.model.entries)} entries")
            for rc in summary[:10]:
                print(f"  {rc.index}: {rc.field} ({rc.count})")

        if args.search is not None:
            hit = workspace.search(args.search)
            if hit is not None:
                print(f"Field {hit.index}: {hit.name}")
    except LinkViewError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.output:
        surface.save(args.output)
    else:
        surface.show()


if __name__ == '__main__':
    main()
