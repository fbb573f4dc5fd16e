import pytest

from xxteafile.key_management import CipherKey

ZERO_KEY_HEX = '0' * 32
SAMPLE_KEY_HEX = '0123456789abcdefFEDCBA9876543210'


@pytest.fixture
def zero_key():
    return CipherKey.from_hex(ZERO_KEY_HEX)


@pytest.fixture
def sample_key():
    return CipherKey.from_hex(SAMPLE_KEY_HEX)


@pytest.fixture
def key_file(tmp_path):
    path = tmp_path / 'key.txt'
    path.write_text(SAMPLE_KEY_HEX + '\n')
    return path


@pytest.fixture
def write_file(tmp_path):
    def write(name, data):
        path = tmp_path / name
        path.write_bytes(data)
        return path
    return write
