#!/usr/bin/env python3
"""
descent-hog CLI - Command-line interface for Descent .HOG archives.

Usage:
    descent-hog list descent.hog
    descent-hog export descent.hog --level level02.rdl --output level02.ply
    descent-hog export-all descent.hog --output-dir ./levels/ --format glb
    descent-hog text descent.hog --output-dir ./text/
    descent-hog extract descent.hog --output-dir ./extracted/
    descent-hog info descent.hog --level level01.rdl
    descent-hog vertices descent.hog --level level01.rdl
    descent-hog validate descent.hog
"""

import argparse
import json
import logging
import sys
from pathlib import Path


DEFAULT_LEVEL = "level02.rdl"


def _read_level(hog_file, level_name):
    from descent.hog import open_hog
    from descent.rdl import read_rdl

    reader = open_hog(hog_file)
    entry = reader.find(level_name)
    if entry is None:
        raise KeyError(f"Level not found in {hog_file}: {level_name}")
    return entry, read_rdl(entry.read())


def cmd_list(args):
    """List the entries of a .hog file."""
    from descent.hog import get_hog_info

    try:
        info = get_hog_info(args.hog_file)

        print(f"{'Name':<13} Size")
        print("=====================")
        for entry in info["entries"]:
            print(f"{entry['name']:<13} {entry['size']}")

        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_export(args):
    """Export one level to PLY."""
    from descent.mesh import export_level, write_ply

    try:
        entry, level = _read_level(args.hog_file, args.level)

        if args.output:
            path = export_level(level, args.output, name=entry.name, vertices_only=args.vertices_only)
            print(f"Success: {path}")
        else:
            write_ply(level, sys.stdout, name=entry.name, vertices_only=args.vertices_only)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_export_all(args):
    """Export every level in a .hog file."""
    from descent.hog import open_hog
    from descent.mesh import export_level
    from descent.rdl import read_rdl

    try:
        output_dir = Path(args.output_dir)
        count = 0
        for entry in open_hog(args.hog_file):
            if entry.extension != ".rdl":
                continue

            level = read_rdl(entry.read())
            target = output_dir / f"{Path(entry.name).stem}.{args.format}"
            print(f"Writing out {target}")
            export_level(level, target, name=entry.name)
            count += 1

        print(f"Exported {count} levels")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_text(args):
    """Descramble every .txb entry to a .txt file."""
    from descent.hog import open_hog
    from descent.txb import decode_txb

    try:
        output_dir = Path(args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        for entry in open_hog(args.hog_file):
            if entry.extension != ".txb":
                continue

            target = output_dir / f"{Path(entry.name).stem}.txt"
            print(f"Writing out {target}")
            text = decode_txb(entry.read(), crlf=args.crlf)
            with open(target, "w", encoding="latin-1", newline="") as f:
                f.write(text)

        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_extract(args):
    """Extract every entry of a .hog file as-is."""
    from descent.hog import extract_hog

    try:
        output_dir = Path(args.output_dir or f"{Path(args.hog_file).stem}_extracted")

        for path in extract_hog(args.hog_file, output_dir):
            print(f"Writing out {path}")

        print(f"Extracted to: {output_dir}")
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_info(args):
    """Show information about a level."""
    try:
        entry, level = _read_level(args.hog_file, args.level)
        info = level.to_dict()

        if args.json:
            print(json.dumps({"name": entry.name, **info}, indent=2))
            return 0

        print(f"Level: {entry.name} ({entry.size} bytes)")
        print(f"Version: {info['version']}")
        print(f"Vertices: {info['vertex_count']}")
        print(f"Cubes: {info['cube_count']}")
        print(f"Exterior sides: {info['exterior_sides']}")
        print(f"Walls: {info['walls']}")
        print(f"Energy centers: {info['energy_centers']}")
        if "bounds" in info:
            lo, hi = info["bounds"]["min"], info["bounds"]["max"]
            print(f"Bounds: ({lo[0]:.2f}, {lo[1]:.2f}, {lo[2]:.2f}) - ({hi[0]:.2f}, {hi[1]:.2f}, {hi[2]:.2f})")

        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_vertices(args):
    """Dump the vertex table of a level."""
    try:
        entry, level = _read_level(args.hog_file, args.level)

        print(f"File: {entry.name} Size: {entry.size}")
        print(f"Vertex count: {level.vertex_count}")
        for x, y, z in level.vertices:
            print(f"{x:16f} {y:16f} {z:16f}")

        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_validate(args):
    """Validate a .hog file and the levels in it."""
    from descent.hog import validate_hog

    try:
        valid, errors = validate_hog(args.hog_file)

        if valid:
            print("✓ All levels decoded")
            return 0
        else:
            print("✗ Validation failed:")
            for error in errors:
                print(f"  - {error}")
            return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="descent-hog CLI - Read Descent .HOG archives and levels",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  descent-hog list descent.hog
  descent-hog export descent.hog --level level01.rdl --output level01.ply
  descent-hog export-all descent.hog --output-dir ./levels/
  descent-hog text descent.hog
        """,
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-v info, -vv debug)")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # list
    list_parser = subparsers.add_parser(
        "list",
        help="List the entries of a .hog file",
    )
    list_parser.add_argument("hog_file", help="Path to .hog file")
    list_parser.set_defaults(func=cmd_list)

    # export
    export_parser = subparsers.add_parser(
        "export",
        help="Export one level to PLY (stdout by default)",
    )
    export_parser.add_argument("hog_file", help="Path to .hog file")
    export_parser.add_argument("--level", "-l", default=DEFAULT_LEVEL, help=f"Level entry name (default: {DEFAULT_LEVEL})")
    export_parser.add_argument("--output", "-o", help="Output file (.ply, .glb, .obj, .stl)")
    export_parser.add_argument("--vertices-only", action="store_true", help="Write vertices without faces (PLY only)")
    export_parser.set_defaults(func=cmd_export)

    # export-all
    export_all_parser = subparsers.add_parser(
        "export-all",
        help="Export every level in a .hog file",
    )
    export_all_parser.add_argument("hog_file", help="Path to .hog file")
    export_all_parser.add_argument("--output-dir", "-o", default=".", help="Output directory (default: .)")
    export_all_parser.add_argument("--format", "-f", default="ply", choices=["ply", "glb", "obj", "stl"], help="Mesh format (default: ply)")
    export_all_parser.set_defaults(func=cmd_export_all)

    # text
    text_parser = subparsers.add_parser(
        "text",
        help="Descramble every .txb entry to .txt",
    )
    text_parser.add_argument("hog_file", help="Path to .hog file")
    text_parser.add_argument("--output-dir", "-o", default=".", help="Output directory (default: .)")
    text_parser.add_argument("--crlf", action="store_true", help="Write CR LF line endings as the game does")
    text_parser.set_defaults(func=cmd_text)

    # extract
    extract_parser = subparsers.add_parser(
        "extract",
        help="Extract every entry without decoding",
    )
    extract_parser.add_argument("hog_file", help="Path to .hog file")
    extract_parser.add_argument("--output-dir", "-o", help="Output directory")
    extract_parser.set_defaults(func=cmd_extract)

    # info
    info_parser = subparsers.add_parser(
        "info",
        help="Show information about a level",
    )
    info_parser.add_argument("hog_file", help="Path to .hog file")
    info_parser.add_argument("--level", "-l", default=DEFAULT_LEVEL, help=f"Level entry name (default: {DEFAULT_LEVEL})")
    info_parser.add_argument("--json", action="store_true", help="Print JSON")
    info_parser.set_defaults(func=cmd_info)

    # vertices
    vertices_parser = subparsers.add_parser(
        "vertices",
        help="Dump the vertex table of a level",
    )
    vertices_parser.add_argument("hog_file", help="Path to .hog file")
    vertices_parser.add_argument("--level", "-l", default=DEFAULT_LEVEL, help=f"Level entry name (default: {DEFAULT_LEVEL})")
    vertices_parser.set_defaults(func=cmd_vertices)

    # validate
    validate_parser = subparsers.add_parser(
        "validate",
        help="Check a .hog file and decode every level in it",
    )
    validate_parser.add_argument("hog_file", help="Path to .hog file")
    validate_parser.set_defaults(func=cmd_validate)

    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if not args.command:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
