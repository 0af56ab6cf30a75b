import hashlib

from scribe.models.checksum import compute_digest, verify

HELLO_SHA256 = "b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9"


def test_compute_digest_known_bytes(tmp_path):
    path = tmp_path / "hello.bin"
    path.write_bytes(b"hello world")

    assert compute_digest(path) == HELLO_SHA256
    assert compute_digest(path) == HELLO_SHA256


def test_compute_digest_streams_in_chunks(tmp_path):
    data = bytes(range(256)) * 1000
    path = tmp_path / "big.bin"
    path.write_bytes(data)

    assert compute_digest(path, chunk_size=7) == hashlib.sha256(data).hexdigest()


def test_verify_exact_match(tmp_path):
    path = tmp_path / "hello.bin"
    path.write_bytes(b"hello world")

    assert verify(path, HELLO_SHA256) is True
    assert verify(path, HELLO_SHA256.upper()) is True


def test_verify_detects_mutation(tmp_path):
    path = tmp_path / "hello.bin"
    path.write_bytes(b"hello world!")

    assert verify(path, HELLO_SHA256) is False


def test_verify_empty_expected_digest(tmp_path):
    path = tmp_path / "hello.bin"
    path.write_bytes(b"hello world")

    assert verify(path, "") is False


def test_verify_unreadable_file(tmp_path):
    assert verify(tmp_path / "missing.bin", HELLO_SHA256) is False
