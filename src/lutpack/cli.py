#!/usr/bin/env python3
"""
lutpack CLI - 3D LUT decoder
Command-line interface for packing .cube and .3dl files into LUT textures.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .decoders import DecodeResult
from .errors import ConfigurationError, LutError, summarize_issues
from .router import decode_file
from .sink import PngImageSink
from .utils.config_file import ConfigFileManager
from .utils.logging import configure_from_cli, get_cli_args_parser, get_logger


class Colors:
    """ANSI color codes for terminal output."""
    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'


def print_colored(message: str, color: str = Colors.OKBLUE):
    """Print colored message to console."""
    print(f"{color}{message}{Colors.ENDC}")


def _decoder_config(args):
    manager = ConfigFileManager()
    manager.load()
    return manager.decoder_config(
        quantization=getattr(args, 'quantization', None),
        max_lut_size=getattr(args, 'max_lut_size', None),
        degenerate_domain=getattr(args, 'degenerate_domain', None),
    )


def _configure_logging(args) -> None:
    """Logging from the config files' logging section, with CLI flags on top."""
    manager = ConfigFileManager()
    manager.load()
    try:
        base = manager.log_config()
    except ConfigurationError:
        # invalid files are reported by the command that reads them
        base = None
    try:
        configure_from_cli(
            log_level=args.log_level,
            log_format=args.log_format,
            log_file=args.log_file,
            base=base,
        )
    except OSError as e:
        raise ConfigurationError(f"Cannot open log file: {e}") from e


def _report_partial(result: DecodeResult) -> None:
    if result.halted:
        print_colored(
            f"Warning: decoding stopped early on a repeated size declaration "
            f"({result.rows_written}/{result.expected_rows} rows)",
            Colors.WARNING,
        )
    elif not result.complete:
        print_colored(
            f"Warning: only {result.rows_written}/{result.expected_rows} rows were written",
            Colors.WARNING,
        )
    if result.issues:
        counts = ", ".join(f"{kind}={count}" for kind, count in summarize_issues(result.issues).items())
        if result.dropped_issues:
            counts += f", {result.dropped_issues} more not recorded"
        print_colored(f"Skipped lines: {counts}", Colors.WARNING)


def cmd_decode(args) -> int:
    """Decode a LUT file and write the packed PNG."""
    input_path = Path(args.input)
    output_path = Path(args.output) if args.output else input_path.with_suffix('.png')

    result = decode_file(input_path, _decoder_config(args))
    if result.image is None:
        print_colored(f"Error: no LUT size declaration found in {input_path}", Colors.FAIL)
        return 1

    PngImageSink().write(result.image, output_path)
    get_logger("cli").info("Packed LUT written", output=str(output_path), size=result.size)

    _report_partial(result)
    print_colored(
        f"Wrote {result.image.width}x{result.image.height} LUT image to {output_path}",
        Colors.OKGREEN,
    )
    return 0


def cmd_info(args) -> int:
    """Decode a LUT file and print what was found."""
    result = decode_file(args.input, _decoder_config(args))

    if args.json:
        data = result.to_dict()
        if args.verbose:
            data["issue_details"] = [issue.to_dict() for issue in result.issues]
        print(json.dumps(data, indent=2))
        return 0

    print_colored(f"LUT: {args.input}", Colors.BOLD)
    print(f"  Format:        {result.format}")
    if result.title:
        print(f"  Title:         {result.title}")
    print(f"  Size:          {result.size if result.size else 'not declared'}")
    if result.image is not None:
        print(f"  Image:         {result.image.width}x{result.image.height}")
    print(f"  Rows written:  {result.rows_written}/{result.expected_rows}")
    print(f"  Halted:        {'yes' if result.halted else 'no'}")
    print(f"  Issues:        {result.issue_count}")

    if args.verbose:
        for issue in result.issues:
            print(f"    line {issue.line_number}: {issue.kind.value}: {issue.message}")

    return 0


def cmd_config(args) -> int:
    """Show or initialize configuration files."""
    manager = ConfigFileManager()

    if args.config_action == 'init':
        path = manager.init_config(target=args.target, force=args.force)
        print_colored(f"Created config file: {path}", Colors.OKGREEN)
        return 0

    manager.load()
    for error in manager.get_validation_errors():
        print_colored(f"Config error: {error.path}: {error.message}", Colors.WARNING)
    print(manager.show_config(as_yaml=not args.flat))
    return 0


def _add_decoder_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--quantization', choices=['nearest', 'truncate'],
                        help='Rounding rule for 8-bit texels (default: nearest)')
    parser.add_argument('--max-lut-size', type=int, dest='max_lut_size',
                        help='Reject LUTs with a larger edge length (default: 256)')
    parser.add_argument('--degenerate-domain', choices=['error', 'zero'], dest='degenerate_domain',
                        help='Handling of DOMAIN_MIN == DOMAIN_MAX (default: error)')


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog='lutpack',
        description='lutpack - decode .cube and .3dl LUTs into packed LUT textures',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pack a .cube LUT into a PNG next to it
  lutpack decode grade.cube

  # Choose the output path and rounding rule
  lutpack decode film.3dl --output textures/film.png --quantization truncate

  # Inspect a LUT without writing anything
  lutpack info grade.cube --verbose

  # Create a default user configuration file
  lutpack config init
        """
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    for flags, options in get_cli_args_parser():
        parser.add_argument(*flags, **options)

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    decode_parser = subparsers.add_parser('decode', help='Decode a LUT file into a packed PNG')
    decode_parser.add_argument('input', type=str, help='Input .cube or .3dl file')
    decode_parser.add_argument('-o', '--output', type=str, help='Output PNG path (default: input with .png suffix)')
    _add_decoder_options(decode_parser)
    decode_parser.set_defaults(func=cmd_decode)

    info_parser = subparsers.add_parser('info', help='Show what a LUT file contains')
    info_parser.add_argument('input', type=str, help='Input .cube or .3dl file')
    info_parser.add_argument('--json', action='store_true', help='Print as JSON')
    info_parser.add_argument('-v', '--verbose', action='store_true', help='List every skipped line')
    _add_decoder_options(info_parser)
    info_parser.set_defaults(func=cmd_info)

    config_parser = subparsers.add_parser('config', help='Manage configuration')
    config_subparsers = config_parser.add_subparsers(dest='config_action', help='Config actions')

    show_parser = config_subparsers.add_parser('show', help='Display merged configuration')
    show_parser.add_argument('--flat', action='store_true', help='Print key=value pairs instead of YAML')
    show_parser.set_defaults(func=cmd_config)

    init_parser = config_subparsers.add_parser('init', help='Create default configuration file')
    init_parser.add_argument('--target', choices=['user', 'project'], default='user',
                             help='Write ~/.lutpack/config.yaml (user) or ./.lutpack.yaml (project)')
    init_parser.add_argument('--force', action='store_true', help='Overwrite an existing file')
    init_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not getattr(args, 'func', None):
        parser.print_help()
        return 0

    try:
        _configure_logging(args)
        return args.func(args)
    except KeyboardInterrupt:
        print_colored("\n\nOperation cancelled by user", Colors.WARNING)
        return 1
    except LutError as e:
        print_colored(f"\nError: {e}", Colors.FAIL)
        return 1


if __name__ == '__main__':
    sys.exit(main())
