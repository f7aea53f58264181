#!/usr/bin/env python3
"""
Export Program Script.

Run the trajectory pipeline on a drawing file and write a robot program.

Usage:
    python -m splinedraw.scripts.export_program drawing.yaml
    python -m splinedraw.scripts.export_program drawing.yaml --dialect fanuc --program 3
    python -m splinedraw.scripts.export_program drawing.yaml --dry-run
    python -m splinedraw.scripts.export_program drawing.yaml --accept-out-of-bounds

Exit codes:
    0  program written (or printed with --dry-run)
    1  invalid settings, drawing file or export request
    2  nothing to export
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from splinedraw.animation.clock import build_animation_table, format_clock
from splinedraw.codegen.base import ExportError, ExportStatus
from splinedraw.codegen.exporter import export_drawing, write_program
from splinedraw.configs.loader import ConfigError, RobotDialect, Settings, load_settings
from splinedraw.geometry.envelope import BoundaryStatus, snap_to_grid
from splinedraw.model.drawing import Drawing
from splinedraw.model.types import RawPoint, Transition, TransitionPoint
from splinedraw.utils.logging_config import push_context, setup_logging
from splinedraw.utils.validators import DrawingFileV1, load_drawing_file

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NO_POINTS = 2


def build_drawing(
    spec: DrawingFileV1,
    settings: Settings,
    *,
    accept_partial: bool = False,
    snap: bool = False,
) -> Drawing:
    """Run every path of *spec* through the pipeline into a new ``Drawing``.

    Paths rejected by the boundary check (or with fewer than 2 samples)
    are reported and left out; transition overrides refer to positions
    in the resulting drawing.
    """
    drawing = Drawing()
    snap_size = settings.grid.snap_size

    for number, path_spec in enumerate(spec.paths, start=1):
        samples = path_spec.points
        if snap:
            samples = [snap_to_grid(x, y, snap_size) for x, y in samples]
        raw = [RawPoint(x, y, float(i)) for i, (x, y) in enumerate(samples)]
        label = path_spec.name or f"path #{number}"

        proposal = drawing.propose_stroke(raw, settings)
        report = proposal.report
        if proposal.status is BoundaryStatus.EMPTY:
            print(f"  {label}: skipped (fewer than 2 points)")
            continue
        if proposal.status is BoundaryStatus.OUTSIDE:
            print(f"  {label}: rejected, all {report.total} points outside the grid")
            continue
        if proposal.status is BoundaryStatus.PARTIAL:
            print(
                f"  {label}: {report.inside_count} inside, "
                f"{report.outside_count} outside the grid"
            )
            if not accept_partial:
                print("    skipped (use --accept-out-of-bounds to keep the inside points)")
                continue

        path = drawing.commit_stroke(proposal, settings, accept_partial=accept_partial)
        if path is None:
            continue
        if path_spec.name:
            path.name = path_spec.name
        path.visible = path_spec.visible
        if path_spec.velocity is not None:
            path.velocity = path_spec.velocity
            for p in path.processed_points:
                p.velocity = path_spec.velocity

    drawing.ensure_transitions(settings)
    for override in spec.transitions:
        if override.index >= len(drawing.transitions):
            logger.warning(
                "Transition override %d ignored (drawing has %d transitions)",
                override.index, len(drawing.transitions),
            )
            continue
        drawing.transitions[override.index] = Transition(
            points=[
                TransitionPoint(p.offset_x, p.offset_y, p.offset_z, p.velocity)
                for p in override.points
            ]
        )
    return drawing


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Export a drawing as a robot program",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Dialects: {', '.join(d.value for d in RobotDialect)}",
    )
    parser.add_argument(
        "drawing",
        type=str,
        help="Drawing file (drawing.v1 YAML)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Settings file path (default: bundled settings.yaml)",
    )
    parser.add_argument(
        "--dialect",
        "-d",
        type=str,
        choices=[d.value for d in RobotDialect],
        help="Robot dialect override",
    )
    parser.add_argument(
        "--program",
        "-p",
        type=int,
        help="Program index override",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Output directory (default: export.output_directory)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the program instead of writing it",
    )
    parser.add_argument(
        "--accept-out-of-bounds",
        action="store_true",
        help="Keep partially out-of-bounds paths (outside points removed)",
    )
    parser.add_argument(
        "--snap",
        action="store_true",
        help="Snap raw samples to grid.snap_size even when grid.enable_snap is off",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level override",
    )

    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error loading settings: {e}")
        return EXIT_ERROR

    log_cfg = settings.logging
    setup_logging(
        args.log_level or log_cfg.level,
        log_cfg.file,
        json=log_cfg.json,
        context={"app": "export"},
    )

    try:
        spec = load_drawing_file(args.drawing)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading drawing: {e}")
        return EXIT_ERROR

    program_index = (
        args.program if args.program is not None else settings.export.program_index
    )
    push_context(program=program_index)

    print(f"Processing {len(spec.paths)} path(s) from {args.drawing}")
    drawing = build_drawing(
        spec,
        settings,
        accept_partial=args.accept_out_of_bounds,
        snap=args.snap or settings.grid.enable_snap,
    )
    print(f"Drawing contains {len(drawing.paths)} path(s), {drawing.point_count} points")

    table = build_animation_table(
        drawing.paths,
        settings.speeds.default_path_speed_mm_s,
        settings.animation.samples_per_segment,
    )
    print(
        f"Estimated path time: {format_clock(table.total_time, table.total_time)} "
        f"({table.total_length:.1f} mm)"
    )

    try:
        result = export_drawing(
            drawing,
            settings,
            dialect=args.dialect,
            program_index=program_index,
        )
    except ExportError as e:
        print(f"Error: {e}")
        return EXIT_ERROR

    if result.status is ExportStatus.NO_POINTS:
        print("Nothing to export")
        return EXIT_NO_POINTS
    if result.status is ExportStatus.PLACEHOLDER:
        print(f"Warning: {result.dialect.value} export is a placeholder")

    if args.dry_run:
        print(f"\n--- {result.filename} ---")
        print(result.code)
        print(f"--- End {result.filename} ---")
        return EXIT_OK

    out_dir = args.output or settings.export.output_directory
    path = write_program(result, out_dir)
    print(f"Wrote {path} ({result.point_count} points)")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
