#!/usr/bin/env python
"""
Excel-to-XML Exporter – CLI entry point.

Usage:
    python -m excel_to_xml.main -i <excel_file> [-o output.xml] [-w 0,Summary] [-e] [-s] [-t style.xslt]
    python -m excel_to_xml.main -i <excel_file> --config config.yaml

Settings come from an optional YAML config file; command-line flags
override them.
"""

import argparse
import logging
import os
import sys

import yaml

from .errors import ExportError
from .exporter import export_workbook, output_paths
from .model import ExportOptions

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "include_empty_cells": False,
    "single_file": False,
    "sheets": [],
    "template": None,
    "log_level": "INFO",
}


def setup_logging(level_str: str = "INFO"):
    """Configure logging."""
    level = getattr(logging, str(level_str).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )


def load_config(config_path=None) -> dict:
    """Load configuration from a YAML file, merged over the defaults."""
    config = dict(DEFAULT_CONFIG)
    if config_path and os.path.exists(config_path):
        with open(config_path, "r") as f:
            user_config = yaml.safe_load(f) or {}
        config.update(user_config)
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="excel2xml",
        description="Export Excel worksheets as XML, optionally transformed with XSLT",
    )
    parser.add_argument("-i", "--input", required=True, help="Input .xlsx file")
    parser.add_argument(
        "-o", "--output", default=None,
        help="Output XML (or otherwise if transformed) file",
    )
    parser.add_argument(
        "-w", "--workbooks", default=None,
        help="Sheets to export: comma separated names or numbers 0,1,2,...,n",
    )
    parser.add_argument(
        "-e", "--empty", action="store_true", default=None,
        help="Generate tags for empty cells",
    )
    parser.add_argument(
        "-s", "--single", action="store_true", default=None,
        help="Export all worksheets into a single output file",
    )
    parser.add_argument(
        "-t", "--template", default=None,
        help="Transform resulting XML file(s) using an XSLT stylesheet",
    )
    parser.add_argument(
        "--config", default="config.yaml",
        help="Path to config YAML file (default: config.yaml)",
    )
    parser.add_argument(
        "--log-level", default=None,
        help="Logging level: DEBUG, INFO, WARNING, ERROR",
    )
    return parser


def resolve_config(args) -> dict:
    """Return the config file settings with command-line overrides applied."""
    config = load_config(args.config)
    if args.workbooks is not None:
        config["sheets"] = args.workbooks.split(",")
    if args.empty:
        config["include_empty_cells"] = True
    if args.single:
        config["single_file"] = True
    if args.template:
        config["template"] = args.template
    if args.log_level:
        config["log_level"] = args.log_level
    return config


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = resolve_config(args)
    setup_logging(config.get("log_level", "INFO"))

    if not os.path.exists(args.input):
        logger.error(f"Excel file not found: {args.input}")
        return 1

    options = ExportOptions.from_config(config)
    output_base, output_extension = output_paths(args.output, args.input)

    if options.include_empty_cells:
        logger.info("- Generating empty cells")
    if options.single_file:
        logger.info("- Output to single file")
    else:
        logger.info("- Output to one file per sheet")
    if options.export_all_sheets:
        logger.info("- Exporting all sheets")
    else:
        logger.info(f"- Exporting selected sheets: {sorted(options.sheets)}")
    if options.transform:
        logger.info(f"- Transforming using {options.template}")

    try:
        result = export_workbook(args.input, output_base, output_extension, options)
    except ExportError as exc:
        logger.error(str(exc))
        return 1

    if not result.ok:
        logger.error(f"Done with {len(result.failures)} failure(s)")
        return 1
    logger.info("Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
