import hashlib
import io
import os

import pytest

from xxteafile.cipher_core import encrypt_block
from xxteafile.exceptions import InputFileError, OutputFileError, ShortWriteError
from xxteafile.file_mode import (XXTEAFileCipher, encrypt_file, decrypt_file,
                                 encrypt_data, decrypt_data, BLOCK_SIZE, PADDING_BYTE)


def test_zero_block_golden_value(zero_key, write_file, tmp_path):
    source = write_file('zero.bin', bytes(512))
    encrypted = tmp_path / 'zero.enc'
    decrypted = tmp_path / 'zero.dec'

    assert encrypt_file(str(source), str(encrypted), zero_key) == 1
    ciphertext = encrypted.read_bytes()
    assert hashlib.sha256(ciphertext).hexdigest() == \
        '775e3dffd907cdf9aa755f5173b379c397bdfed70aa329c3e7086076eceed066'

    assert decrypt_file(str(encrypted), str(decrypted), zero_key) == 1
    assert decrypted.read_bytes() == bytes(512)


def test_short_file_padded_with_ascii_zero(sample_key, write_file, tmp_path):
    plaintext = b'A' * 500
    source = write_file('short.bin', plaintext)
    encrypted = tmp_path / 'short.enc'

    assert encrypt_file(str(source), str(encrypted), sample_key) == 1
    ciphertext = encrypted.read_bytes()

    assert len(ciphertext) == BLOCK_SIZE
    assert ciphertext == encrypt_block(plaintext + b'0' * 12, sample_key)
    assert hashlib.sha256(ciphertext).hexdigest() == \
        'a7506befa17794335c283c6af5b23f0fcd3a4ae57f11e911356d23a52350670f'


def test_padding_is_not_removed_on_decrypt(sample_key):
    plaintext = b'hello'
    decrypted = decrypt_data(encrypt_data(plaintext, sample_key), sample_key)
    assert decrypted == plaintext + PADDING_BYTE * (BLOCK_SIZE - len(plaintext))


def test_multi_block_golden_value(sample_key, write_file, tmp_path):
    plaintext = bytes(i % 256 for i in range(1100))
    source = write_file('pattern.bin', plaintext)
    encrypted = tmp_path / 'pattern.enc'
    decrypted = tmp_path / 'pattern.dec'

    assert encrypt_file(str(source), str(encrypted), sample_key) == 3
    ciphertext = encrypted.read_bytes()
    assert len(ciphertext) == 1536
    assert hashlib.sha256(ciphertext).hexdigest() == \
        'a40ff376d0b4f06ea67012ba08dc32bca339d0c7ec02914d498ed7920fb934e0'

    assert decrypt_file(str(encrypted), str(decrypted), sample_key) == 3
    assert decrypted.read_bytes() == plaintext + b'0' * 436


def test_empty_file_in_both_directions(sample_key, write_file, tmp_path):
    source = write_file('empty.bin', b'')
    encrypted = tmp_path / 'empty.enc'
    decrypted = tmp_path / 'empty.dec'

    assert encrypt_file(str(source), str(encrypted), sample_key) == 0
    assert encrypted.read_bytes() == b''

    assert decrypt_file(str(source), str(decrypted), sample_key) == 0
    assert decrypted.read_bytes() == b''


@pytest.mark.parametrize('blocks', [0, 1, 3])
@pytest.mark.parametrize('remainder', [1, 12, 511])
def test_decrypt_drops_trailing_partial_block(sample_key, write_file, tmp_path, blocks, remainder):
    data = os.urandom(BLOCK_SIZE * blocks + remainder)
    source = write_file('odd.enc', data)
    decrypted = tmp_path / 'odd.dec'

    assert decrypt_file(str(source), str(decrypted), sample_key) == blocks
    output = decrypted.read_bytes()
    assert len(output) == BLOCK_SIZE * blocks
    assert output == decrypt_data(data[:BLOCK_SIZE * blocks], sample_key)


@pytest.mark.parametrize('size', [1, 511, 512, 513, 1024, 5000])
def test_encrypted_length_is_block_multiple(sample_key, size):
    ciphertext = encrypt_data(os.urandom(size), sample_key)
    assert len(ciphertext) == -(-size // BLOCK_SIZE) * BLOCK_SIZE


@pytest.mark.parametrize('blocks', [1, 2, 5])
def test_round_trip_files(sample_key, write_file, tmp_path, blocks):
    plaintext = os.urandom(BLOCK_SIZE * blocks)
    source = write_file('plain.bin', plaintext)
    encrypted = tmp_path / 'plain.enc'
    decrypted = tmp_path / 'plain.dec'

    encrypt_file(str(source), str(encrypted), sample_key)
    assert encrypted.read_bytes() != plaintext
    decrypt_file(str(encrypted), str(decrypted), sample_key)
    assert decrypted.read_bytes() == plaintext


def test_encryption_is_deterministic(sample_key):
    plaintext = os.urandom(BLOCK_SIZE * 2 + 7)
    assert encrypt_data(plaintext, sample_key) == encrypt_data(plaintext, sample_key)


def test_blocks_are_independent(sample_key):
    block = os.urandom(BLOCK_SIZE)
    ciphertext = encrypt_data(block * 3, sample_key)
    assert ciphertext == encrypt_block(block, sample_key) * 3


def test_key_bit_flip_changes_every_block(sample_key):
    plaintext = os.urandom(BLOCK_SIZE * 3)
    reference = encrypt_data(plaintext, sample_key)

    for bit in range(128):
        words = list(sample_key.words)
        words[bit // 32] ^= 1 << (bit % 32)
        ciphertext = encrypt_data(plaintext, words)
        for offset in range(0, len(reference), BLOCK_SIZE):
            assert ciphertext[offset:offset + BLOCK_SIZE] != reference[offset:offset + BLOCK_SIZE], \
                f"Block at {offset} unchanged after flipping key bit {bit}"


def test_wrong_key_does_not_decrypt(sample_key, zero_key):
    plaintext = os.urandom(BLOCK_SIZE)
    assert decrypt_data(encrypt_data(plaintext, sample_key), zero_key) != plaintext


def test_existing_output_is_truncated(sample_key, write_file):
    source = write_file('plain.bin', b'x' * 10)
    output = write_file('out.enc', b'y' * 4096)

    encrypt_file(str(source), str(output), sample_key)
    assert len(output.read_bytes()) == BLOCK_SIZE


def test_missing_input_file(sample_key, tmp_path):
    source = str(tmp_path / 'missing.bin')
    output = tmp_path / 'out.bin'

    with pytest.raises(InputFileError) as exc_info:
        encrypt_file(source, str(output), sample_key)
    assert str(exc_info.value) == f"No input file '{source}' found."
    assert not output.exists()

    with pytest.raises(InputFileError):
        decrypt_file(source, str(output), sample_key)


def test_input_is_a_directory(sample_key, tmp_path):
    with pytest.raises(InputFileError):
        encrypt_file(str(tmp_path), str(tmp_path / 'out.bin'), sample_key)


def test_output_cannot_be_created(sample_key, write_file, tmp_path):
    source = write_file('plain.bin', b'data')
    output = str(tmp_path / 'no' / 'such' / 'dir' / 'out.bin')

    with pytest.raises(OutputFileError) as exc_info:
        encrypt_file(str(source), output, sample_key)
    assert not isinstance(exc_info.value, ShortWriteError)
    assert str(exc_info.value) == f"Output file '{output}' can't be created."


def test_invalid_key_rejected_before_files_are_touched(tmp_path):
    output = tmp_path / 'out.bin'
    with pytest.raises(ValueError):
        encrypt_file(str(tmp_path / 'missing.bin'), str(output), [1, 2, 3])
    with pytest.raises(ValueError):
        decrypt_file(str(tmp_path / 'missing.bin'), str(output), [1, 2, 3, 1 << 32])
    assert not output.exists()


class ShortWriter(io.BytesIO):
    def write(self, data):
        return super().write(data[:-1])


class FailingWriter(io.BytesIO):
    def write(self, data):
        raise OSError(28, 'No space left on device')


@pytest.mark.parametrize('writer', [ShortWriter, FailingWriter])
def test_short_write_is_fatal(sample_key, writer):
    pipeline = XXTEAFileCipher(sample_key)
    source = io.BytesIO(bytes(BLOCK_SIZE * 2))

    with pytest.raises(ShortWriteError) as exc_info:
        pipeline._encrypt_stream(source, writer(), 'in.bin', 'out.bin')
    assert str(exc_info.value) == "Error while writing into 'out.bin'."

    with pytest.raises(ShortWriteError):
        pipeline._decrypt_stream(io.BytesIO(bytes(BLOCK_SIZE)), writer(), 'in.bin', 'out.bin')


class TrickleReader(io.BytesIO):
    def read(self, size=-1):
        return super().read(min(size, 100))


def test_short_reads_are_joined_into_blocks(sample_key):
    plaintext = os.urandom(BLOCK_SIZE * 2)
    dest = io.BytesIO()

    XXTEAFileCipher(sample_key)._encrypt_stream(TrickleReader(plaintext), dest, 'in', 'out')
    assert dest.getvalue() == encrypt_data(plaintext, sample_key)


def test_pipeline_requires_matching_block_size(sample_key):
    from xxteafile.cipher_core import XXTEABlockCipher
    with pytest.raises(ValueError):
        XXTEAFileCipher(sample_key, block_cipher=XXTEABlockCipher(block_size=256))


class FailingCloseWriter(io.BytesIO):
    """Accepts writes, then fails to flush when closed."""

    def __init__(self):
        super().__init__()
        self.failed = False

    def close(self):
        if not self.failed:
            self.failed = True
            raise OSError(28, 'No space left on device')
        super().close()


def test_failed_flush_on_close_is_a_short_write(sample_key, write_file, tmp_path, monkeypatch):
    from xxteafile.file_mode import block_pipeline

    source = write_file('plain.bin', b'data' * 200)
    output = str(tmp_path / 'out.bin')
    writer = FailingCloseWriter()
    real_open = open

    def fake_open(path, mode='r', *args, **kwargs):
        if 'w' in mode:
            return writer
        return real_open(path, mode, *args, **kwargs)

    monkeypatch.setattr(block_pipeline, 'open', fake_open, raising=False)
    with pytest.raises(ShortWriteError) as exc_info:
        encrypt_file(str(source), output, sample_key)
    assert str(exc_info.value) == f"Error while writing into '{output}'."
    assert isinstance(exc_info.value.__cause__, OSError)
    assert len(writer.getvalue()) == 2 * BLOCK_SIZE
