#!/usr/bin/env python3
"""
hmmdecode utilities: convert, inspect.

Usage:
    hmmdecode-utils convert data/ model.json
    hmmdecode-utils inspect model.json [--full]
"""

import argparse
import os
import sys

import numpy as np

from hmmdecode.core.alphabet import Alphabet
from hmmdecode.core.errors import DecodeError
from hmmdecode.core.hmm import ViterbiHMM
from hmmdecode.core.model_io import (
    load_model_with_metadata, load_text_matrix, load_text_vector, save_model,
    TRANSITION_FILE, EMISSION_FILE, INITIAL_FILE,
)
from hmmdecode.cli.common import add_alphabet_args, add_version_args


# =============================================================================
# convert subcommand
# =============================================================================

def cmd_convert(args):
    """Convert a text-layout parameter directory to a JSON model."""
    if not os.path.isdir(args.input):
        print(f"Error: Input directory not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    print(f"Loading parameters from {args.input}...")
    try:
        transmat = load_text_matrix(os.path.join(args.input, TRANSITION_FILE))
        emissionprob = load_text_matrix(os.path.join(args.input, EMISSION_FILE))
        startprob = load_text_vector(os.path.join(args.input, INITIAL_FILE))
    except (DecodeError, FileNotFoundError) as e:
        print(f"Error loading parameters: {e}", file=sys.stderr)
        sys.exit(1)

    model = ViterbiHMM(n_states=len(startprob))
    model.startprob_ = startprob
    model.transmat_ = transmat
    model.emissionprob_ = emissionprob

    alphabet = args.alphabet if args.alphabet is not None else Alphabet.default()

    print(f"  States: {model.n_states}")
    print(f"  Symbols: {model.n_symbols}")
    print(f"  Alphabet: {alphabet.to_string()!r}")
    if len(alphabet) != model.n_states:
        print(f"  WARNING: alphabet has {len(alphabet)} symbols for {model.n_states} states")

    print(f"Saving to {args.output}...")
    output = save_model(model, args.output, alphabet=alphabet)
    print(f"Done! Output size: {os.path.getsize(output):,} bytes")


# =============================================================================
# inspect subcommand
# =============================================================================

def cmd_inspect(args):
    """Inspect a model file: print alphabet, parameters, emission summary."""
    filepath = args.model

    if not os.path.exists(filepath):
        print(f"Error: File not found: {filepath}", file=sys.stderr)
        sys.exit(1)

    try:
        model, alphabet = load_model_with_metadata(filepath)
    except DecodeError as e:
        print(f"Error loading model: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Model: {filepath}")
    print(f"  States: {model.n_states}")
    print(f"  Symbols: {model.n_symbols}")
    print(f"  Alphabet: {alphabet.to_string()!r}")
    print()

    labels = [repr(s) for s in alphabet] if len(alphabet) == model.n_states \
        else [str(i) for i in range(model.n_states)]

    print("Start probabilities:")
    for label, p in zip(labels, model.startprob_):
        print(f"  {label:>5s}: {p:.6f}")
    print()

    print("Transition matrix (most likely next state):")
    for i, row in enumerate(model.transmat_):
        j = int(np.argmax(row))
        print(f"  {labels[i]:>5s} -> {labels[j]:>5s}  p={row[j]:.6f}  "
              f"self={row[i]:.6f}  row sum={row.sum():.6f}")
    print()

    emissionprob = model.emissionprob_
    print(f"Emission probabilities: {emissionprob.shape[0]} states x {emissionprob.shape[1]} symbols")
    for i, row in enumerate(emissionprob):
        print(f"  {labels[i]:>5s}: min={row.min():.6f}  max={row.max():.6f}  "
              f"argmax={int(np.argmax(row))}  row sum={row.sum():.6f}")

    if args.full:
        print()
        print("Full emission table:")
        for i, row in enumerate(emissionprob):
            print(f"  {labels[i]:>5s}: " + "  ".join(f"{v:.6f}" for v in row))


# =============================================================================
# main
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='hmmdecode model utilities',
    )
    add_version_args(parser)
    subparsers = parser.add_subparsers(dest='command')

    p_convert = subparsers.add_parser('convert', help='Convert text-layout parameters to JSON')
    p_convert.add_argument('input', help='Directory with the parameter text files')
    p_convert.add_argument('output', help='Output JSON model path')
    add_alphabet_args(p_convert)
    p_convert.set_defaults(func=cmd_convert)

    p_inspect = subparsers.add_parser('inspect', help='Print a summary of a JSON model')
    p_inspect.add_argument('model', help='JSON model path')
    p_inspect.add_argument('--full', action='store_true',
                           help='Print the full emission table')
    p_inspect.set_defaults(func=cmd_inspect)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(1)
    args.func(args)


if __name__ == '__main__':
    main()
