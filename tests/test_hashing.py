"""Tests for content hashing."""

import hashlib

import pytest

from blossom.hashing import IncrementalChecksumCalculator, compute_file_sha256


def test_file_hash_matches_sha256(tmp_path):
    data = b'x' * 200_000
    path = tmp_path / 'blob.bin'
    path.write_bytes(data)

    assert compute_file_sha256(path) == hashlib.sha256(data).hexdigest()
    assert compute_file_sha256(str(path), chunk_size=7) == hashlib.sha256(data).hexdigest()


def test_hash_is_deterministic(sample_file):
    assert compute_file_sha256(sample_file) == compute_file_sha256(sample_file)


def test_one_byte_change_changes_hash(tmp_path):
    first = tmp_path / 'a.bin'
    second = tmp_path / 'b.bin'
    first.write_bytes(b'hello world')
    second.write_bytes(b'hello worle')

    assert compute_file_sha256(first) != compute_file_sha256(second)


def test_empty_file(tmp_path):
    path = tmp_path / 'empty'
    path.write_bytes(b'')

    assert compute_file_sha256(path) == hashlib.sha256(b'').hexdigest()


def test_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        compute_file_sha256(tmp_path / 'missing.bin')


def test_incremental_calculator_rejects_update_after_finalize():
    calculator = IncrementalChecksumCalculator()
    calculator.update(b'abc')
    assert calculator.finalize() == hashlib.sha256(b'abc').hexdigest()

    with pytest.raises(ValueError):
        calculator.update(b'more')
