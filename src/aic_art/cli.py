#!/usr/bin/env python3
"""Show a random (or chosen) artwork from the Art Institute of Chicago in the terminal."""

import argparse
import logging
import os
import re
import sys
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from . import api
from .caption import build_caption
from .converter import CONVERTERS, get_converter
from .errors import AicError, NoImageAvailable
from .layout import read_terminal_size
from .model import ColorMode
from .pipeline import Pipeline

ESC = "\x1b"

MAX_LIMIT = 100  # hard cap on --limit for serverside performance

QUALITY_WIDTHS = {
    "h": 843,
    "high": 843,
    "m": 400,
    "medium": 400,
    "l": 200,
    "low": 200,
}


# -----------------------------
# Options
# -----------------------------

@dataclass
class QueryOptions:
    artwork_id: Optional[int] = None
    json_path: Optional[str] = None
    limit: Optional[int] = None
    fulltext: Optional[str] = None


@dataclass
class RenderOptions:
    fill: bool = True  # fill background by default
    width: int = 843  # default for artwork detail pages
    converter: str = "auto"


@dataclass
class Options:
    debug: bool = False
    log_path: Optional[str] = None

    query: QueryOptions = field(default_factory=QueryOptions)
    render: RenderOptions = field(default_factory=RenderOptions)


LOG = logging.getLogger("aic_art")


def setup_logging(debug: bool, log_path: str | None = None) -> None:
    level = logging.DEBUG if debug else logging.WARNING
    LOG.setLevel(logging.DEBUG if (debug or log_path) else logging.WARNING)

    handlers: list[logging.Handler] = []

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handlers.append(sh)

    if log_path:
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s: %(message)s"))
        handlers.append(fh)

    LOG.handlers[:] = handlers
    LOG.propagate = False


# -----------------------------
# Argument parsing
# -----------------------------

def _artwork_id(value: str) -> int:
    if not re.fullmatch(r"[0-9]+", value):
        raise argparse.ArgumentTypeError("Please provide a numeric id for the --id option.")
    return int(value)


def _limit(value: str) -> int:
    if not re.fullmatch(r"[0-9]+", value):
        raise argparse.ArgumentTypeError("Please provide a number for the --limit option.")
    n = int(value)
    if n > MAX_LIMIT:
        raise argparse.ArgumentTypeError(f"Please keep --limit under {MAX_LIMIT}.")
    if n < 1:
        raise argparse.ArgumentTypeError("Please set --limit to at least 1.")
    return n


def _quality(value: str) -> int:
    try:
        return QUALITY_WIDTHS[value]
    except KeyError:
        raise argparse.ArgumentTypeError(
            "Please provide a valid value for the --quality option: h, m, l, high, medium, low"
        ) from None


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="aic",
        description="Render artwork from the Art Institute of Chicago as colored text",
    )
    ap.add_argument("query", nargs="?", default=None, help="(Optional) Full-text search string.")
    ap.add_argument("-i", "--id", dest="artwork_id", type=_artwork_id, default=None,
                    help="Retrieve specific artwork via numeric id.")
    ap.add_argument("-j", "--json", dest="json_path", default=None,
                    help="Path to JSON file containing a query to run.")
    ap.add_argument("-l", "--limit", type=_limit, default=None,
                    help="How many artworks to retrieve. Defaults to 1. "
                         "One random artwork from results will be shown.")
    ap.add_argument("-n", "--no-fill", dest="fill", action="store_false",
                    help="Disable background color fill.")
    ap.add_argument("-q", "--quality", dest="width", type=_quality, default=843,
                    help="Width of image retrieved from server; reduces color artifacts. "
                         "h, high = 843 (default); m, medium = 400; l, low = 200")
    ap.add_argument("--converter", choices=["auto"] + sorted(CONVERTERS), default="auto",
                    help="Image-to-cells converter (auto = jp2a if installed, else pillow)")
    ap.add_argument("--debug", action="store_true", help="Verbose logging to stderr")
    ap.add_argument("--log", dest="log_path", default=None, help="Also write debug log to FILE")
    return ap


def parse_args(argv: Optional[Sequence[str]] = None) -> Options:
    args = build_parser().parse_args(argv)
    return Options(
        debug=args.debug,
        log_path=args.log_path,
        query=QueryOptions(
            artwork_id=args.artwork_id,
            json_path=args.json_path,
            limit=args.limit,
            fulltext=args.query or None,
        ),
        render=RenderOptions(fill=args.fill, width=args.width, converter=args.converter),
    )


# -----------------------------
# Run
# -----------------------------

def query_path(q: QueryOptions) -> Path:
    if q.artwork_id is not None:
        return api.QUERY_ID
    if q.json_path:
        return Path(q.json_path)
    if q.fulltext:
        return api.QUERY_FULLTEXT
    return api.QUERY_RANDOM


def _remover(path: str):
    def remove() -> None:
        Path(path).unlink(missing_ok=True)
    return remove


def run(opt: Options, out=None) -> int:
    out = out if out is not None else sys.stdout

    path = query_path(opt.query)
    LOG.debug("Query file: %s", path)
    template = api.load_query(path)
    query = api.render_query(
        template,
        now=time.strftime("%H:%M:%S"),
        fulltext=opt.query.fulltext,
        artwork_id=opt.query.artwork_id,
        limit=opt.query.limit,
        source=str(path.resolve()),
    )

    artwork = api.pick_artwork(api.search(query))
    LOG.debug("Artwork %s: %r (image_id=%s)", artwork.id, artwork.title, artwork.image_id)
    caption = build_caption(artwork)

    if not artwork.image_id:
        raise NoImageAvailable(caption)

    fd, image_path = tempfile.mkstemp(prefix="aic-art-", suffix=".jpg")
    os.close(fd)
    remove = _remover(image_path)
    try:
        api.download_image(artwork.image_id, opt.render.width, image_path)
        pipeline = Pipeline(
            converter=get_converter(opt.render.converter),
            mode=ColorMode.from_fill(opt.render.fill),
            terminal=read_terminal_size(),
            out=out,
            cleanup=[remove],
        )
        pipeline.run(image_path, caption)
    finally:
        remove()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    opt = parse_args(argv)

    t0 = time.perf_counter()
    setup_logging(opt.debug, opt.log_path)
    LOG.debug("Options: %s", opt)

    try:
        code = run(opt)
    except NoImageAvailable as e:
        print(f"{ESC}[0;31m{e}{ESC}[0m", file=sys.stderr)
        if e.caption is not None:
            print(e.caption.text())
        return e.exit_code
    except AicError as e:
        print(e, file=sys.stderr)
        return e.exit_code
    except Exception as e:
        LOG.debug("Unexpected error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    LOG.debug("Done in %.3fs", time.perf_counter() - t0)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
