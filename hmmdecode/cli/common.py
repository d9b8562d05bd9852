"""Shared argparse argument factories and setup for hmmdecode CLI tools.

Each add_* function adds a group of related arguments to an ArgumentParser.
Default values can be overridden per-script where needed.
"""

import argparse
import logging
import sys

from hmmdecode.core.alphabet import Alphabet
from hmmdecode.core.model import DEFAULT_TOL
from hmmdecode.inference.engine import DEFAULT_TRIM_END


def add_input_args(parser: argparse.ArgumentParser) -> None:
    """Add model/observation sources (-d/--data-dir or -m/--model with --observations)."""
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '-d', '--data-dir',
        help="Directory with transitionMatrix.txt, emissionMatrix.txt, "
             "initialStateDistribution.txt and observations.txt"
    )
    source.add_argument(
        '-m', '--model',
        help="JSON model file (requires --observations)"
    )
    parser.add_argument(
        '--observations', default=None,
        help="Observation file; overrides observations.txt when used with --data-dir"
    )


def add_trim_args(parser: argparse.ArgumentParser,
                  default: int = DEFAULT_TRIM_END) -> None:
    """Add --trim-end argument."""
    parser.add_argument(
        '--trim-end', type=int, default=default,
        help=f"Path positions to drop from the end before collapsing (default: {default})"
    )


def add_alphabet_args(parser: argparse.ArgumentParser) -> None:
    """Add --alphabet argument."""
    parser.add_argument(
        '--alphabet', type=parse_alphabet, default=None,
        help="Symbols for states 0..n-1 as one string "
             "(default: from the model file, else a-z followed by space)"
    )


def add_validation_args(parser: argparse.ArgumentParser,
                        tolerance: float = DEFAULT_TOL) -> None:
    """Add --tolerance and --no-validate arguments."""
    parser.add_argument(
        '--tolerance', type=float, default=tolerance,
        help=f"Allowed deviation of each distribution's sum from 1 (default: {tolerance})"
    )
    parser.add_argument(
        '--no-validate', action='store_true',
        help="Skip model and observation checks"
    )


def add_output_args(parser: argparse.ArgumentParser,
                    default: str = 'data.txt',
                    help_text: str = "Output file for the decoded state path") -> None:
    """Add -o/--output argument."""
    parser.add_argument(
        '-o', '--output', default=default,
        help=f"{help_text} ('-' to skip writing, default: {default})"
    )


def add_verbose_args(parser: argparse.ArgumentParser) -> None:
    """Add --verbose flag."""
    parser.add_argument(
        '-v', '--verbose', action='store_true',
        help="Verbose output"
    )


def add_version_args(parser: argparse.ArgumentParser) -> None:
    """Add --version flag."""
    from hmmdecode import __version__
    parser.add_argument(
        '--version', action='version',
        version=f'%(prog)s {__version__}'
    )


def parse_alphabet(text: str) -> Alphabet:
    """argparse type for --alphabet."""
    try:
        return Alphabet.from_string(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def setup_logging(verbose: bool = False) -> None:
    """Log plain messages to stderr; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
    )
