"""
Command Line Interface

Encrypts or decrypts a file with a key read from a key file, or writes a
new random key file. Exit status is 0 on success (or when help is shown)
and 1 on any usage or processing error.
"""

import os
import sys
import logging
import argparse
from typing import List, Optional

from .exceptions import XXTEAFileError
from .file_mode.block_pipeline import XXTEAFileCipher, BLOCK_SIZE
from .key_management.key_file import load_key, generate_key, save_key, KEY_HEX_LENGTH

logger = logging.getLogger(__name__)

PROG = 'xxteafile'

# Environment overrides
KEY_FILE_ENV = 'XXTEAFILE_KEY_FILE'
LOG_LEVEL_ENV = 'XXTEAFILE_LOG_LEVEL'

DESCRIPTION = f"""\
Crypt and decrypt file by XXTEA cipher. Input file is padded to {BLOCK_SIZE}B boundary.
Key file must contain exactly {KEY_HEX_LENGTH} hexadecimal characters."""

EPILOG = """\
examples:
  Crypt file in.bin to file out.bin with key file key.txt:
    $ %(prog)s -c -i in.bin -o out.bin -k key.txt
  Decrypt file in.bin to file out.bin with key file key.txt:
    $ %(prog)s -d -i in.bin -o out.bin -k key.txt
  Create a new random key file key.txt:
    $ %(prog)s -g -k key.txt"""


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser reporting usage errors in one line with status 1."""

    def error(self, message):
        self.exit(1, f"{self.prog}: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=PROG,
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter)

    parser.add_argument('-c', '--encrypt', action='store_true',
                        help='Encrypt the input file.')
    parser.add_argument('-d', '--decrypt', action='store_true',
                        help='Decrypt the input file. A trailing partial block is ignored.')
    parser.add_argument('-g', '--generate-key', action='store_true',
                        help='Write a new random key to the key file.')
    parser.add_argument('-i', '--input', metavar='FILE', help='Input file.')
    parser.add_argument('-o', '--output', metavar='FILE', help='Output file.')
    parser.add_argument('-k', '--key', metavar='FILE', default=os.environ.get(KEY_FILE_ENV),
                        help=f'Key file. Defaults to ${KEY_FILE_ENV}.')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log progress to stderr.')
    return parser


def _configure_logging(verbose: bool) -> None:
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(os.environ.get(LOG_LEVEL_ENV, 'WARNING').upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format='%(name)s: %(levelname)s: %(message)s')


def _validate(args: argparse.Namespace) -> Optional[str]:
    """Return a usage message for an invalid option combination, or None."""
    modes = sum((args.encrypt, args.decrypt, args.generate_key))
    if modes > 1:
        return "Use only one of options -c, -d or -g."
    if modes == 0:
        return "Option -c, -d or -g must be used."
    if not args.generate_key:
        if not args.input:
            return "Input file must be specified."
        if not args.output:
            return "Output file must be specified."
    if not args.key:
        return "Key file must be specified."
    return None


def run(args: argparse.Namespace) -> None:
    """
    Perform the action selected by parsed arguments.

    Raises:
        XXTEAFileError: On any key or file failure
    """
    if args.generate_key:
        save_key(generate_key(), args.key)
        return

    # The key is loaded before either data file is opened
    pipeline = XXTEAFileCipher(load_key(args.key))
    if args.encrypt:
        pipeline.encrypt_file(args.input, args.output)
    else:
        pipeline.decrypt_file(args.input, args.output)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the command line tool.

    Args:
        argv: Arguments without the program name (default: sys.argv[1:])

    Returns:
        Process exit status
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # --help and usage errors
        return e.code

    _configure_logging(args.verbose)

    message = _validate(args)
    if message:
        sys.stderr.write(f"{parser.prog}: {message}\n")
        return 1

    try:
        run(args)
    except XXTEAFileError as e:
        logger.debug("Processing failed", exc_info=True)
        sys.stderr.write(f"{parser.prog}: {e}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
