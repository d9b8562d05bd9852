#!/usr/bin/env python3
"""
hmmdecode decode CLI entry point.
Recovers the most likely hidden-state path of an HMM and prints it as a
collapsed text message.
"""

import argparse
import logging
import os
import sys

from hmmdecode.core.errors import DecodeError
from hmmdecode.core.hmm import log_likelihood
from hmmdecode.core.model_io import (
    load_model_with_metadata, load_observations, load_text_model, write_path,
)
from hmmdecode.inference.engine import decode
from hmmdecode.cli.common import (
    add_input_args, add_trim_args, add_alphabet_args, add_validation_args,
    add_output_args, add_verbose_args, add_version_args, setup_logging,
)

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Decode an HMM observation sequence into a text message (Viterbi)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Input:
  Either a directory in the text layout (-d), or a JSON model (-m) plus an
  observation file (--observations).

Examples:
  # Text layout, state path written to data.txt
  hmmdecode-decode -d data/

  # JSON model with a custom alphabet, no path file
  hmmdecode-decode -m model.json --observations obs.txt --alphabet "ab" -o -
'''
    )

    add_version_args(parser)
    add_input_args(parser)
    add_alphabet_args(parser)
    add_trim_args(parser)
    add_validation_args(parser)
    add_output_args(parser)

    parser.add_argument('--likelihood', action='store_true',
                        help='Also compute the total log-likelihood of the observations')
    parser.add_argument('--progress', action='store_true',
                        help='Show a progress bar over timesteps')
    add_verbose_args(parser)

    args = parser.parse_args(argv)
    if args.model is not None and args.observations is None:
        parser.error("--model requires --observations")
    if args.trim_end < 0:
        parser.error("--trim-end must be >= 0")
    return args


def load_inputs(args):
    """Model and alphabet selected by the parsed arguments."""
    alphabet = None
    if args.data_dir is not None:
        model = load_text_model(args.data_dir)
        if args.observations is not None:
            model = model.with_observations(load_observations(args.observations))
    else:
        hmm, alphabet = load_model_with_metadata(args.model)
        logger.info("Loaded model from %s", args.model)
        model = hmm.to_model(load_observations(args.observations))

    if args.alphabet is not None:
        alphabet = args.alphabet
    return model, alphabet


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        model, alphabet = load_inputs(args)
        result = decode(
            model,
            alphabet=alphabet,
            trim_end=args.trim_end,
            validate=not args.no_validate,
            tol=args.tolerance,
            progress=args.progress,
        )
        if args.likelihood:
            logger.info("Observation log-likelihood: %.4f",
                        log_likelihood(model, progress=args.progress))
    except (DecodeError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(result.message)

    if args.output != '-':
        out_dir = os.path.dirname(args.output)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        write_path(result.path, args.output)


if __name__ == '__main__':
    main()
