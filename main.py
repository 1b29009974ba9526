import argparse
import logging
import sys
from pathlib import Path

# Make the local package importable without installation.
ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT / "src"))

from svgscene import FallbackPaint, ReaderSettings, SceneSvg, SvgReader


def configure_logging(verbosity: int) -> None:
    """WARNING by default, INFO with -v, DEBUG with -vv."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Parse an SVG file into a scene tree and write it back out."
    )
    parser.add_argument(
        "input",
        help="Path to the SVG input.",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output path (default: <input_stem>.scene.svg, or .scene.json with --json).",
    )
    parser.add_argument(
        "--root-id",
        help="Prefix for every id in the document (default: derived from the file name).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Write the scene tree as JSON instead of SVG.",
    )
    parser.add_argument(
        "--fallback-paint",
        choices=[mode.value for mode in FallbackPaint],
        help="Colour used for url(#id) paints that cannot be resolved.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log diagnostics (repeat for unsupported attributes too).",
    )
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    input_arg = Path(args.input)
    input_path = input_arg if input_arg.is_absolute() else (ROOT / input_arg)
    if not input_path.exists():
        raise FileNotFoundError(f"Input SVG not found: {input_path}")
    suffix = ".scene.json" if args.json else ".scene.svg"
    output_path = (
        Path(args.output)
        if args.output
        else input_path.with_name(f"{input_path.stem}{suffix}")
    )
    if not output_path.is_absolute():
        output_path = ROOT / output_path

    overrides = {}
    if args.fallback_paint:
        overrides["fallback_paint"] = args.fallback_paint
    settings = ReaderSettings(**overrides)

    reader = SvgReader.from_file(input_path, root_id=args.root_id, settings=settings)
    scene = reader.build_scene()

    output_path.parent.mkdir(parents=True, exist_ok=True)
    if args.json:
        output_path.write_text(scene.model_dump_json(indent=2), encoding="utf-8")
    else:
        SceneSvg(scene, viewport=reader.viewport).write(output_path)
    print(f"Parsed: {input_path} ({len(reader.diagnostics)} diagnostic(s))")
    print(f"Wrote: {output_path}")

if __name__ == "__main__":
    main(sys.argv[1:])
