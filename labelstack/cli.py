"""Console scripts for labeled image stacks stored as .npy files.

Each input is a .npy file whose labels come from the sidecar written by
``labelstack.io.save_npy`` or from ``--input-labels``.

Console Scripts:
    stackinfo: Print labels, shape, dtype and global intensity range
    stackreduce: Reduce (and optionally mask) a stack to requested labels
    stackbin: Block-bin two axes of a stack
"""

import argparse
import logging
import sys
from typing import List, Optional

from labelstack.core import LabeledArray
from labelstack.io import load_npy, save_npy
from labelstack.logging import configure_logging


def parse_label_list(value: str) -> List[str]:
    """Parse comma-separated labels ("x,y,c"); a bare "xyc" also works."""
    value = value.strip()
    if not value:
        raise argparse.ArgumentTypeError("Expected at least one label")
    if "," in value:
        return [x.strip() for x in value.split(",")]
    return list(value)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", help="Input .npy file")
    parser.add_argument(
        "--input-labels",
        type=parse_label_list,
        default=None,
        help="Labels of the input axes (e.g. 'x,y,c'). Read from the sidecar if omitted",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging to stderr"
    )


def _load(args: argparse.Namespace) -> LabeledArray:
    if args.verbose:
        configure_logging(level=logging.DEBUG)
    print(f"Loading stack from: {args.input}")
    stack = load_npy(args.input, labels=args.input_labels)
    print(f"Loaded {stack}")
    return stack


def stackinfo(argv: Optional[List[str]] = None) -> None:
    """Console script printing a summary of a labeled stack."""
    parser = argparse.ArgumentParser(
        description="Show labels, shape and intensity range of a labeled stack",
    )
    _add_common_arguments(parser)
    args = parser.parse_args(argv)

    try:
        stack = _load(args)
        vmin, vmax = stack.global_max_min()
        print(f"Labels: {','.join(stack.dims)}")
        print(f"Shape: {stack.shape}")
        print(f"Dtype: {stack.dtype}")
        print(f"Global min/max: {vmin} {vmax}")
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def stackreduce(argv: Optional[List[str]] = None) -> None:
    """Console script reducing a labeled stack to requested labels."""
    parser = argparse.ArgumentParser(
        description="Reduce a labeled stack to the requested labels",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  stackreduce image.npy projection.npy --labels x,y --mode max
  stackreduce image.npy masked.npy --labels x,y,c --mode sum --mask mask.npy
        """,
    )
    _add_common_arguments(parser)
    parser.add_argument("output", help="Output .npy file")
    parser.add_argument(
        "--labels",
        type=parse_label_list,
        required=True,
        help="Requested output labels, in order (e.g. 'x,y')",
    )
    parser.add_argument(
        "--mode",
        type=str,
        default="sum",
        choices=["sum", "mean", "max", "min", "reshaped"],
        help="How axes that are not requested are collapsed (default: sum)",
    )
    parser.add_argument("--mask", default=None, help="Mask .npy file (with sidecar)")
    args = parser.parse_args(argv)

    try:
        stack = _load(args)
        mask = load_npy(args.mask) if args.mask else None
        result = stack.apply_mask_stack(mask, args.labels, args.mode)
        path = save_npy(result, args.output)
        print(f"Saved {result} to: {path}")
        print("Completed successfully!")
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def stackbin(argv: Optional[List[str]] = None) -> None:
    """Console script block-binning two axes of a labeled stack."""
    parser = argparse.ArgumentParser(
        description="Bin two axes of a labeled stack by an integer factor",
    )
    _add_common_arguments(parser)
    parser.add_argument("output", help="Output .npy file")
    parser.add_argument(
        "--factor", type=int, required=True, help="Positive integer bin factor"
    )
    parser.add_argument(
        "--first-two",
        type=parse_label_list,
        default=None,
        help="Labels of the two binned axes (default: x,y)",
    )
    args = parser.parse_args(argv)

    try:
        stack = _load(args)
        binned = stack.bin_first_two_dims(args.factor, args.first_two)
        path = save_npy(binned, args.output)
        print(f"Saved {binned} to: {path}")
        print("Completed successfully!")
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


_COMMANDS = {
    "stackinfo": stackinfo,
    "stackreduce": stackreduce,
    "stackbin": stackbin,
}


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] in _COMMANDS:
        _COMMANDS[sys.argv[1]](sys.argv[2:])
    else:
        print(f"Usage: python -m labelstack.cli [{'|'.join(_COMMANDS)}] ...")
        sys.exit(1)
