"""Command-line interface for the business card generator."""

import argparse
import sys
import logging
from dataclasses import replace
from pathlib import Path
from typing import List

from .config import Config
from .generator import CardGenerator
from .importer import create_import_template, import_records, load_records_yaml
from .models import Record
from .qrcode_image import generate_qr_code
from .templates import create_basic_template, create_qrcode_template

DEFAULT_CONFIG = 'config.yaml'

SAMPLE_TEMPLATES = {
    'basic': create_basic_template,
    'qrcode': create_qrcode_template,
}


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description='Generate personalized PowerPoint business cards from a template and employee records.'
    )

    parser.add_argument(
        '--config',
        help=f'Path to configuration file (default: {DEFAULT_CONFIG} if present)'
    )

    parser.add_argument(
        '--template',
        help='Path to PowerPoint card template (overrides config)'
    )

    parser.add_argument(
        '--records',
        help='Path to employee records, .xlsx or .yaml (overrides config)'
    )

    parser.add_argument(
        '--output-dir',
        help='Directory for the generated ZIP archive (overrides config)'
    )

    parser.add_argument(
        '--workers',
        type=int,
        help='Number of worker threads (overrides config)'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        help='Overall batch deadline in seconds (overrides config)'
    )

    parser.add_argument(
        '--no-qrcode',
        action='store_true',
        help='Do not render QR codes; {qrcode} lines are removed'
    )

    parser.add_argument(
        '--create-template',
        nargs=2,
        metavar=('KIND', 'PATH'),
        help='Write a sample card template (basic or qrcode) and exit'
    )

    parser.add_argument(
        '--create-import-template',
        metavar='PATH',
        help='Write a sample employee spreadsheet and exit'
    )

    return parser.parse_args(argv)


def load_config(config_arg) -> Config:
    """Load the configuration file, or an empty config when none is used."""
    if config_arg:
        return Config(config_arg)
    if Path(DEFAULT_CONFIG).exists():
        return Config(DEFAULT_CONFIG)
    return Config.from_dict({'paths': {}})


def load_records(path: Path, config: Config) -> List[Record]:
    """Load records from a spreadsheet or YAML file based on its suffix."""
    suffix = path.suffix.lower()
    if suffix in ('.yaml', '.yml'):
        return load_records_yaml(path)

    result = import_records(path, config.processing_options, config.formatting_policy)
    if not result.success:
        raise ValueError(result.error_message)
    for warning in result.warnings:
        print(f"  Warning: {warning}")
    return result.records


def write_sample(path_str: str, data: bytes) -> int:
    path = Path(path_str)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    print(f"Wrote {path} ({len(data)} bytes)")
    return 0


def main(argv=None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_arguments(argv)

    # Sample files need no configuration
    if args.create_template:
        kind, path = args.create_template
        if kind not in SAMPLE_TEMPLATES:
            print(f"Error: unknown template kind '{kind}' (choose from: {', '.join(SAMPLE_TEMPLATES)})")
            return 1
        return write_sample(path, SAMPLE_TEMPLATES[kind]())
    if args.create_import_template:
        return write_sample(args.create_import_template, create_import_template())

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        print(f"Please ensure the configuration file exists at: {args.config}")
        return 1
    except Exception as e:
        print(f"Error loading configuration: {e}")
        return 1

    # Apply CLI overrides
    if args.template:
        config.set_path('template', args.template)
    if args.records:
        config.set_path('records', args.records)
    if args.output_dir:
        config.set_path('output_dir', args.output_dir)

    try:
        config.validate_paths()
        options = config.processing_options
        if args.workers is not None:
            options = replace(options, max_workers=args.workers)
        if args.timeout is not None:
            options = replace(options, batch_timeout_seconds=args.timeout)
        options.validate()
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print("=" * 60)
    print("Business Card Generator")
    print("=" * 60)
    print(f"Configuration: {args.config or '(none)'}")
    print(f"Template:      {config.template_path}")
    print(f"Records:       {config.records_path}")
    print(f"Output dir:    {options.output_dir or '(system temp)'}")
    print(f"Workers:       {options.max_workers}")
    print(f"QR codes:      {'off' if args.no_qrcode else 'on'}")
    print("=" * 60)

    try:
        records = load_records(config.records_path, config)
    except Exception as e:
        logging.exception("Error loading records")
        print(f"\nError loading records: {e}")
        return 1

    print(f"Loaded {len(records)} record(s)")

    generator = CardGenerator(
        options=options,
        image_generator=None if args.no_qrcode else generate_qr_code,
        policy=config.formatting_policy,
    )
    result = generator.generate_batch(
        records,
        config.template_path,
        progress=lambda pct: print(f"\r  Progress: {pct:3d}%", end='', flush=True),
    )
    print()

    for error in result.errors:
        print(f"  Failed: {error}")

    if not result.success:
        print(f"\nError generating business cards:\n{result.error_message}")
        return 1

    print("\n" + "=" * 60)
    print(f"Generated: {result.generated_count}  Failed: {result.failed_count}")
    print(f"Archive:   {result.archive_path}")
    print("=" * 60)
    return 0


if __name__ == '__main__':
    sys.exit(main())
