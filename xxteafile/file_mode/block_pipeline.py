"""
File Block Pipeline

This module applies the block cipher to whole files. Input is read in
512-byte blocks and every block is ciphered on its own; there is no
chaining between blocks and the output carries no header or length field.

Encryption pads a short final block with ASCII '0' characters, so its
output is always a multiple of the block size. Decryption only handles
full blocks and drops a short trailing chunk without complaint. The
padding is never removed; callers needing the exact plaintext length
must keep it themselves.
"""

import io
import logging
from typing import BinaryIO, Callable, Iterable, Optional, Union

from ..cipher_core.block_cipher import XXTEABlockCipher, WORD_SIZE
from ..exceptions import InputFileError, OutputFileError, ShortWriteError
from ..key_management.key_file import CipherKey

logger = logging.getLogger(__name__)

BLOCK_SIZE = 512
BLOCK_WORDS = BLOCK_SIZE // WORD_SIZE
PADDING_BYTE = b'0'

KeyLike = Union[CipherKey, Iterable[int]]


def _read_block(source: BinaryIO, path: str) -> bytes:
    """
    Read up to one block, stopping early only at end of stream.

    Args:
        source: The input stream
        path: Name reported in errors

    Returns:
        The bytes read, shorter than a block only at end of stream
    """
    chunk = b''
    try:
        while len(chunk) < BLOCK_SIZE:
            data = source.read(BLOCK_SIZE - len(chunk))
            if not data:
                break
            chunk += data
    except OSError as e:
        raise InputFileError(path, f"Error while reading '{path}'.") from e
    return chunk


def _write_block(dest: BinaryIO, block: bytes, path: str) -> None:
    try:
        written = dest.write(block)
    except OSError as e:
        raise ShortWriteError(path) from e
    if written is not None and written < BLOCK_SIZE:
        raise ShortWriteError(path)


class XXTEAFileCipher:
    """
    Encrypts and decrypts files block by block under one key.
    """

    def __init__(self, key: KeyLike, block_cipher: Optional[XXTEABlockCipher] = None):
        """
        Initialize the pipeline with a key.

        Args:
            key: The 128-bit key, as a CipherKey or four 32-bit words
            block_cipher: Optional pre-initialized block cipher

        Raises:
            ValueError: If the key is not four 32-bit words
        """
        self.key = CipherKey.coerce(key)
        if block_cipher is None:
            self.cipher = XXTEABlockCipher(block_size=BLOCK_SIZE)
        elif block_cipher.block_size != BLOCK_SIZE:
            raise ValueError(f"Block cipher must use {BLOCK_SIZE}-byte blocks")
        else:
            self.cipher = block_cipher

    def _encrypt_stream(self, source: BinaryIO, dest: BinaryIO,
                        input_name: str, output_name: str) -> int:
        blocks = 0
        while True:
            chunk = _read_block(source, input_name)
            if not chunk:
                break

            last = len(chunk) < BLOCK_SIZE
            if last:
                logger.debug(f"Padding final block of '{input_name}' "
                             f"with {BLOCK_SIZE - len(chunk)} bytes")
                chunk = chunk.ljust(BLOCK_SIZE, PADDING_BYTE)

            _write_block(dest, self.cipher.encrypt_block(chunk, self.key), output_name)
            blocks += 1
            if last:
                break
        return blocks

    def _decrypt_stream(self, source: BinaryIO, dest: BinaryIO,
                        input_name: str, output_name: str) -> int:
        blocks = 0
        while True:
            chunk = _read_block(source, input_name)
            if len(chunk) < BLOCK_SIZE:
                if chunk:
                    logger.debug(f"Discarding {len(chunk)} trailing bytes of '{input_name}'")
                break

            _write_block(dest, self.cipher.decrypt_block(chunk, self.key), output_name)
            blocks += 1
        return blocks

    def _process_file(self, input_path: str, output_path: str,
                      process: Callable[[BinaryIO, BinaryIO, str, str], int]) -> int:
        try:
            source = open(input_path, 'rb')
        except OSError as e:
            raise InputFileError(input_path) from e

        with source:
            try:
                dest = open(output_path, 'wb')
            except OSError as e:
                raise OutputFileError(output_path) from e

            try:
                with dest:
                    return process(source, dest, input_path, output_path)
            except OSError as e:
                # Buffered data that fails to flush on close
                raise ShortWriteError(output_path) from e

    def encrypt_file(self, input_path: str, output_path: str) -> int:
        """
        Encrypt a file.

        Args:
            input_path: The plaintext file
            output_path: The ciphertext file, created or truncated

        Returns:
            Number of blocks written

        Raises:
            InputFileError: If the input cannot be opened or read
            OutputFileError: If the output cannot be created
            ShortWriteError: If a block cannot be written in full
        """
        blocks = self._process_file(input_path, output_path, self._encrypt_stream)
        logger.info(f"Encrypted '{input_path}' into '{output_path}' ({blocks} blocks)")
        return blocks

    def decrypt_file(self, input_path: str, output_path: str) -> int:
        """
        Decrypt a file.

        A trailing chunk shorter than a block is ignored.

        Args:
            input_path: The ciphertext file
            output_path: The plaintext file, created or truncated

        Returns:
            Number of blocks written

        Raises:
            InputFileError: If the input cannot be opened or read
            OutputFileError: If the output cannot be created
            ShortWriteError: If a block cannot be written in full
        """
        blocks = self._process_file(input_path, output_path, self._decrypt_stream)
        logger.info(f"Decrypted '{input_path}' into '{output_path}' ({blocks} blocks)")
        return blocks

    def encrypt(self, plaintext: bytes) -> bytes:
        """Encrypt a whole buffer, padding it like a file."""
        dest = io.BytesIO()
        self._encrypt_stream(io.BytesIO(plaintext), dest, '<bytes>', '<bytes>')
        return dest.getvalue()

    def decrypt(self, ciphertext: bytes) -> bytes:
        """Decrypt a whole buffer, dropping a short trailing chunk."""
        dest = io.BytesIO()
        self._decrypt_stream(io.BytesIO(ciphertext), dest, '<bytes>', '<bytes>')
        return dest.getvalue()


def encrypt_file(input_path: str, output_path: str, key: KeyLike) -> int:
    """
    Encrypt input_path into output_path.

    Args:
        input_path: The plaintext file
        output_path: The ciphertext file
        key: The 128-bit key

    Returns:
        Number of blocks written
    """
    return XXTEAFileCipher(key).encrypt_file(input_path, output_path)


def decrypt_file(input_path: str, output_path: str, key: KeyLike) -> int:
    """
    Decrypt input_path into output_path.

    Args:
        input_path: The ciphertext file
        output_path: The plaintext file
        key: The 128-bit key

    Returns:
        Number of blocks written
    """
    return XXTEAFileCipher(key).decrypt_file(input_path, output_path)


def encrypt_data(plaintext: bytes, key: KeyLike) -> bytes:
    return XXTEAFileCipher(key).encrypt(plaintext)


def decrypt_data(ciphertext: bytes, key: KeyLike) -> bytes:
    return XXTEAFileCipher(key).decrypt(ciphertext)


if __name__ == "__main__":
    key = CipherKey.from_hex('0123456789abcdefFEDCBA9876543210')

    plaintext = b"This is a test message for block encryption." * 20
    ciphertext = encrypt_data(plaintext, key)
    print(f"Plaintext: {len(plaintext)} bytes, ciphertext: {len(ciphertext)} bytes")
    assert len(ciphertext) % BLOCK_SIZE == 0

    decrypted = decrypt_data(ciphertext, key)
    padding = len(decrypted) - len(plaintext)
    assert decrypted == plaintext + PADDING_BYTE * padding

    # A short trailing chunk is dropped on decryption
    assert decrypt_data(ciphertext + b'extra', key) == decrypted

    print("File pipeline tests completed successfully!")
