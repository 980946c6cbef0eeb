#!/usr/bin/env python3
"""
Top-level pipeline: parse C/C++ inputs, merge them, select type declarations
and write a generated report.

Inputs come from ``--input`` flags, a generation manifest, or both. Files are
merged in input order, so on USR conflicts the earliest declaration wins.

Usage:
    python run_pipeline.py --input include/ --output out/report.hpp
    python run_pipeline.py --manifest generation.yml
    python run_pipeline.py --input "src/**/*.hpp" --input extra.h --dump --dump-format json
"""

import argparse
import json
import logging
import os
import sys
import time
from typing import List, Optional

from ast_model.dump import format_tree, node_to_dict
from ast_model.filter import FilterConfig, NodeFilter
from core.generation_manifest import (
    GenerationManifest,
    load_generation_manifest,
    resolve_manifest_path,
)
from core.startup_config import (
    ConfigValidationError,
    resolve_log_level,
    resolve_strict_config_validation,
)
from core.structured_logging import configure_structured_logging, set_run_id, stage_scope
from extraction.extractor import ExtractionStats, import_files, parse_and_merge
from generation.generator import Generator
from generation.record_report import describe_type

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "output/generated.hpp"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="C/C++ declaration metadata pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_pipeline.py --input include/ --output out/report.hpp\n"
            "  python run_pipeline.py --manifest generation.yml --dump\n"
        ),
    )

    parser.add_argument(
        "--input",
        action="append",
        default=[],
        help="File, directory or wildcard to parse. May be repeated.",
    )
    parser.add_argument(
        "--manifest",
        default=None,
        help="Path to a YAML/JSON generation manifest.",
    )
    parser.add_argument(
        "--output",
        default=None,
        help=f"Path of the generated file. Default: manifest output or {DEFAULT_OUTPUT}",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        default=False,
        help="Print the merged declaration tree to stdout.",
    )
    parser.add_argument(
        "--dump-format",
        choices=("text", "json"),
        default="text",
        help="Format used by --dump. Default: text",
    )

    args = parser.parse_args(argv)
    if not args.input and not args.manifest:
        parser.error("at least one --input or a --manifest is required")
    return args


def collect_input_files(
    cli_inputs: List[str],
    manifest: Optional[GenerationManifest],
) -> List[str]:
    """Expand CLI and manifest inputs into an ordered, de-duplicated file list."""
    patterns = list(cli_inputs)
    if manifest is not None:
        patterns.extend(resolve_manifest_path(manifest, raw) for raw in manifest.inputs)

    files: List[str] = []
    seen = set()
    for pattern in patterns:
        for path in import_files(pattern):
            if path not in seen:
                seen.add(path)
                files.append(path)
    return files


def write_report(
    output_path: str,
    selected: NodeFilter,
    stats: ExtractionStats,
    title: str,
) -> bool:
    """Write one section per selected type plus warnings for skipped items."""
    parent = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(parent, exist_ok=True)

    with Generator(output_path) as gen:
        gen.out(f"// Generated by cxxmeta: {title}")
        gen.out("#pragma once")
        gen.out("")

        for node in selected:
            if not node.usr:
                gen.warn(f"type '{node.name}' has no USR", node)
            gen.named_separator(node.qualified_name or node.name or f"(anonymous {node.kind_name})")
            for line in describe_type(node):
                gen.out(f"// {line}")
            gen.out("")

        if stats.files_failed:
            gen.warn(f"{stats.files_failed} input file(s) failed to parse")
        if stats.parse_errors:
            gen.warn(f"{stats.parse_errors} syntax error node(s) in parsed inputs")

    return gen.done()


def run(args: argparse.Namespace) -> int:
    """Execute the pipeline and return a process exit code."""
    strict = resolve_strict_config_validation()

    manifest: Optional[GenerationManifest] = None
    if args.manifest:
        manifest = load_generation_manifest(args.manifest, strict=strict)
        logger.info("Loaded manifest '%s' from %s", manifest.name, args.manifest)

    output_path = args.output
    if output_path is None:
        output_path = (
            resolve_manifest_path(manifest, manifest.output) if manifest else DEFAULT_OUTPUT
        )
    continue_on_error = manifest.continue_on_error if manifest else True

    files = collect_input_files(args.input, manifest)
    if not files:
        raise FileNotFoundError("No C/C++ input files found")
    logger.info("Parsing %d input file(s)", len(files))

    t0 = time.time()
    merged, stats = parse_and_merge(files, continue_on_error=continue_on_error)
    logger.info("Parsing completed in %.2fs: %s", time.time() - t0, stats)

    if merged is None:
        logger.warning("Nothing parsed. Skipping generation.")
        return 1

    if args.dump:
        if args.dump_format == "json":
            print(json.dumps(node_to_dict(merged), indent=2))
        else:
            print(format_tree(merged))

    filter_payload = manifest.filter.to_mapping() if manifest else None
    with stage_scope("select"):
        config = FilterConfig.from_mapping(filter_payload, strict=strict)
        selected = NodeFilter(config)
        accepted = selected.add_all(merged.iter_descendants())
        logger.info("Selected %d type declaration(s)", accepted)

    title = manifest.name if manifest else "ad-hoc"
    with stage_scope("generate"):
        written = write_report(output_path, selected, stats, title)
    if not written:
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the pipeline."""
    configure_structured_logging(resolve_log_level())
    run_id = set_run_id()

    args = parse_args(argv)

    logger.info("*" * 80)
    logger.info(" cxxmeta pipeline (run %s)", run_id)
    logger.info("*" * 80)

    try:
        code = run(args)
    except FileNotFoundError as e:
        logger.error("File error: %s", e)
        sys.exit(1)
    except (ValueError, ConfigValidationError) as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)

    if code == 0:
        logger.info("Pipeline finished successfully.")
    sys.exit(code)


if __name__ == "__main__":
    main()
