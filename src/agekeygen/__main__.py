"""
age-keygen command-line entry point.

Generate a new X25519 key pair, or convert an identity file to a
recipients file.

Usage::

    age-keygen [-o OUTPUT]
    age-keygen -y [-o OUTPUT] [INPUT]

Options:
    -o, --output OUTPUT    Write the result to the file at path OUTPUT.
    -y                     Convert an identity file to a recipients file.

If an OUTPUT file is specified, it is created with mode 0600 and the
public key is printed to standard error. If OUTPUT already exists, it is
not overwritten.

In -y mode, the identity file is read from INPUT or from standard input
and the corresponding recipients are written one per line, with no
comments.

Examples::

    $ age-keygen -o key.txt
    Public key: age1ql3z7hjy54pw3hyww5ayyfg7zqgvc7w3j2elw8zmrj2kg5sfn9aqmcac8p

    $ age-keygen -y key.txt
    age1ql3z7hjy54pw3hyww5ayyfg7zqgvc7w3j2elw8zmrj2kg5sfn9aqmcac8p
"""

from __future__ import annotations

import argparse
import logging
import os
import stat
import sys
from contextlib import ExitStack
from typing import IO, Sequence

from agekeygen.config import KeygenConfig
from agekeygen.exceptions import GenerationError, IdentityFileTooLargeError, ParseError
from agekeygen.identity_file import format_identity, format_recipients, parse_identities
from agekeygen.x25519 import generate

logger = logging.getLogger("agekeygen")


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    # ANSI color codes
    GREY = "\x1b[38;5;244m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        levelname = f"{color}{record.levelname.capitalize()}{self.RESET}"
        return f"{levelname}: {record.getMessage()}"


def setup_logging(verbose: bool = False, no_color: bool = False, level: str = "WARNING") -> None:
    """Configure logging for the tool with optional colors."""
    resolved = logging.DEBUG if verbose else logging.getLevelNamesMapping()[level]

    handler = logging.StreamHandler()
    handler.setLevel(resolved)

    if no_color or not sys.stderr.isatty():
        formatter = logging.Formatter("%(levelname)s: %(message)s")
    else:
        formatter = ColoredFormatter()

    handler.setFormatter(formatter)

    # Repeated calls replace the handler.
    logger.handlers[:] = [handler]
    logger.setLevel(resolved)


def _open_output(path: str) -> IO[str]:
    """Create `path` for writing with mode 0600, refusing to overwrite it."""
    return open(path, "x", encoding="utf-8", opener=lambda p, flags: os.open(p, flags, 0o600))


def is_world_readable(out: IO[str]) -> bool:
    """Return True if `out` is a regular file that other users can read."""
    try:
        st = os.fstat(out.fileno())
    except (OSError, ValueError):
        return False
    return stat.S_ISREG(st.st_mode) and bool(st.st_mode & stat.S_IROTH)


def run_generate(out: IO[str]) -> int:
    """Generate an identity and write it to `out` as an identity file."""
    if is_world_readable(out):
        logger.warning("writing secret key to a world-readable file.")

    try:
        identity = generate()
    except GenerationError as e:
        logger.error("Internal error: %s", e)
        return 1

    if not out.isatty():
        sys.stderr.write(f"Public key: {identity.recipient_string()}\n")

    out.write(format_identity(identity))
    return 0


def run_convert(in_stream: IO[str], out: IO[str], config: KeygenConfig) -> int:
    """Read identities from `in_stream` and write their recipients to `out`."""
    try:
        identities = parse_identities(in_stream, config)
    except (ParseError, IdentityFileTooLargeError, UnicodeDecodeError) as e:
        logger.error("Failed to parse input: %s", e)
        return 1

    if not identities:
        logger.error("No identities found in the input")
        return 1

    out.write(format_recipients(identities))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="age-keygen",
        description="Generate age X25519 identities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the result to the file at path OUTPUT (default: stdout)",
    )
    parser.add_argument(
        "-y",
        dest="convert",
        action="store_true",
        help="Convert an identity file to a recipients file",
    )
    parser.add_argument(
        "inputs",
        nargs="*",
        metavar="INPUT",
        help="Identity file to convert (default: stdin)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )

    args = parser.parse_args(argv)

    try:
        config = KeygenConfig.from_env()
    except ValueError as e:
        setup_logging(args.verbose, args.no_color)
        logger.error("Invalid configuration: %s", e)
        return 1

    setup_logging(args.verbose, args.no_color, config.log_level)

    if args.inputs and not args.convert:
        logger.error("age-keygen takes no arguments")
        return 1
    if len(args.inputs) > 1:
        logger.error("Too many arguments")
        return 1

    with ExitStack() as stack:
        out: IO[str] = sys.stdout
        if args.output:
            try:
                out = stack.enter_context(_open_output(args.output))
            except OSError as e:
                logger.error("Failed to open output file %r: %s", args.output, e)
                return 1
            logger.debug("Writing to %s", args.output)

        if not args.convert:
            return run_generate(out)

        in_stream: IO[str] = sys.stdin
        if args.inputs and args.inputs[0] != "-":
            try:
                in_stream = stack.enter_context(open(args.inputs[0], encoding="utf-8"))
            except OSError as e:
                logger.error("Failed to open input file %r: %s", args.inputs[0], e)
                return 1

        return run_convert(in_stream, out, config)


if __name__ == "__main__":
    sys.exit(main())
