import argparse
import json
import sys

from .assembly import generate_part
from .config import get_settings
from .dimensions import dimensions
from .errors import PartLabError
from .export import ExportFormat, write_export
from .library.catalog import ALL, get_catalog
from .library.models import CATEGORIES


def _parse_assignment(text):
    if "=" not in text:
        raise argparse.ArgumentTypeError(f"expected key=value, got {text!r}")
    key, value = text.split("=", 1)
    key = key.strip()
    value = value.strip()
    try:
        return key, json.loads(value)
    except ValueError:
        return key, value


def cmd_search(args):
    catalog = get_catalog()
    for part in catalog.search(args.query, args.category):
        print(f"{part.id}\t{part.category}\t{part.family}\t{part.name}")


def cmd_export(args):
    part = get_catalog().get(args.part_id)
    if args.set:
        part = part.with_parameters(**dict(args.set))
    result = generate_part(part)
    out_dir = args.output or get_settings().output_dir
    path = write_export(result.mesh, part.name, args.format, out_dir)
    print(path)


def cmd_dimensions(args):
    part = get_catalog().get(args.part_id)
    for dim in dimensions(part, unit=args.unit):
        print(f"{dim.position}\t{dim.label}")


def build_parser():
    parser = argparse.ArgumentParser(prog="partlab")
    sub = parser.add_subparsers(dest="command", required=True)

    search_p = sub.add_parser("search", help="Search the parts catalog")
    search_p.add_argument("query", nargs="?", default="")
    search_p.add_argument("--category", default=ALL, choices=[ALL, *CATEGORIES])
    search_p.set_defaults(func=cmd_search)

    export_p = sub.add_parser("export", help="Export a catalog part as a mesh file")
    export_p.add_argument("part_id")
    export_p.add_argument("--format", default="stl", choices=[fmt.value for fmt in ExportFormat])
    export_p.add_argument("-o", "--output", help="Output directory")
    export_p.add_argument(
        "--set",
        action="append",
        type=_parse_assignment,
        metavar="KEY=VALUE",
        help="Override a geometry parameter (e.g. --set holeRadius=0.25)",
    )
    export_p.set_defaults(func=cmd_export)

    dims_p = sub.add_parser("dimensions", help="Print the dimension labels of a catalog part")
    dims_p.add_argument("part_id")
    dims_p.add_argument("--unit", help="Label unit (default from PARTLAB_UNIT)")
    dims_p.set_defaults(func=cmd_dimensions)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except PartLabError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
