import argparse
import json

from rowdriven.config import get_env
from rowdriven.context import DataSource, load_context
from rowdriven.exceptions import ConfigurationError
from rowdriven.loaders.registry import list_kinds
from rowdriven.logging_config import setup_logging
from rowdriven.runner.aggregate import to_frame


def _show(args):
    source = DataSource(args.paths, kind=args.kind)
    try:
        if args.test_case:
            context = load_context(source, args.test_case)
            data_set = {args.test_case: context.rows()}
        else:
            data_set = source.resolve_loader().load(list(source.paths))
    except ConfigurationError as e:
        raise SystemExit(str(e))

    if args.json:
        print(json.dumps(data_set, indent=2, default=str))
        return

    frame = to_frame(data_set)
    if frame.empty:
        print("No test data found")
        return
    print(frame.to_string(index=False))


def _kinds(args):
    for entry in list_kinds():
        print(f"{entry['kind']:<8} {entry['loader'] or '-'}")


def main(argv=None):
    p = argparse.ArgumentParser(prog="rowdriven", description="Row-driven test data tools")
    p.add_argument("--log-level", type=str, default=get_env("ROWDRIVEN_LOG_LEVEL", "WARNING"))
    subs = p.add_subparsers(dest="cmd", required=True)

    p1 = subs.add_parser("show", help="Load test data sources and print their rows")
    p1.add_argument("paths", nargs="+", help="Source locations, loaded in order")
    p1.add_argument("--kind", type=str, help="Loader kind (inferred from the extension by default)")
    p1.add_argument("--test-case", type=str, help="Only print this test case")
    p1.add_argument("--json", action="store_true", help="Print the rows as JSON")
    p1.set_defaults(func=_show)

    p2 = subs.add_parser("kinds", help="List loader kinds and their adapters")
    p2.set_defaults(func=_kinds)

    args = p.parse_args(argv)
    setup_logging(level=args.log_level.upper())
    args.func(args)

if __name__ == "__main__":
    main()
