"""
Allow running the package directly: python -m mandelzoom

Options given on the command line override settings.json.
"""
import argparse

from .app import run
from .log import verbosity_list
from .numeric import list_backend_names
from .renderer import PARTITIONS
from .settings import load_settings, update_settings


def build_parser():
    parser = argparse.ArgumentParser(
        prog="mandelzoom",
        description="Interactive Mandelbrot set explorer",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--settings",
        default=None,
        help="settings.json to load (default: the one next to the package)",
    )
    parser.add_argument(
        "--size",
        type=int,
        nargs=2,
        metavar=("WIDTH", "HEIGHT"),
        help="window size in pixels",
    )
    parser.add_argument(
        "--centre",
        type=float,
        nargs=2,
        metavar=("X", "Y"),
        help="initial centre of the view",
    )
    parser.add_argument(
        "--zoom",
        type=float,
        help="initial zoom level, the view shows 2**zoom above and below the centre",
    )
    parser.add_argument(
        "--backend",
        choices=list_backend_names(),
        help="number type for coordinates",
    )
    parser.add_argument(
        "--precision",
        type=int,
        help="initial precision in bits of the arbitrary backend",
    )
    parser.add_argument(
        "-j",
        "--workers",
        type=int,
        help="render threads per pass",
    )
    parser.add_argument(
        "--partition",
        choices=PARTITIONS,
        help="how a pass is split between the render threads",
    )
    parser.add_argument(
        "-v",
        "--verbosity",
        choices=verbosity_list,
        help="console log level",
    )
    return parser


def settings_from_args(args):
    """Load the settings file and apply the command line on top of it."""
    settings = load_settings(args.settings)
    overrides = {
        "centre": args.centre,
        "zoom": args.zoom,
        "backend": args.backend,
        "precision": args.precision,
        "workers": args.workers,
        "partition": args.partition,
        "verbosity": args.verbosity,
    }
    if args.size is not None:
        overrides["width"], overrides["height"] = args.size
    return update_settings(settings, overrides)


def main(argv=None):
    args = build_parser().parse_args(argv)
    run(settings_from_args(args))


if __name__ == "__main__":
    main()
