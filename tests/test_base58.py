#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `eosk1.base58` module."

import pytest

from eosk1.base58 import (
    _b58decode,
    _b58decode_to_int,
    _b58encode,
    _b58encode_from_int,
    b58decode,
    b58decode_ripemd160,
    b58encode,
    b58encode_ripemd160,
)
from eosk1.exceptions import EOSK1ValueError, InvalidEncodingError
from eosk1.hashes import ripemd160

EOS_PUB_KEY = "EOS6MRyAjQq8ud7hVNYcfnVPJqcVpscN5So8BhtHuGYqET5GDW5CV"


def test_empty() -> None:
    assert _b58encode(b"") == b""
    assert _b58decode(_b58encode(b"")) == b""

    assert b58decode(b58encode(b""), 0) == b""


def test_hello_world() -> None:
    assert _b58encode(b"hello world") == b"StV1DL6CwTryKyV"
    assert _b58decode(b"StV1DL6CwTryKyV") == b"hello world"
    assert _b58decode(_b58encode(b"hello world")) == b"hello world"
    assert _b58encode(_b58decode(b"StV1DL6CwTryKyV")) == b"StV1DL6CwTryKyV"

    assert b58decode(b58encode(b"hello world"), 11) == b"hello world"


def test_trailing_zeros() -> None:
    assert _b58encode(b"\x00\x00hello world") == b"11StV1DL6CwTryKyV"
    assert _b58decode(b"11StV1DL6CwTryKyV") == b"\x00\x00hello world"
    assert _b58decode(_b58encode(b"\x00\x00hello world")) == b"\x00\x00hello world"
    assert _b58encode(_b58decode(b"11StV1DL6CwTryKyV")) == b"11StV1DL6CwTryKyV"

    assert b58decode(b58encode(b"\x00\x00hello world"), 13) == b"\x00\x00hello world"


def test_exceptions() -> None:

    encoded = b58encode(b"hello world")
    b58decode(encoded, 11)

    wrong_length = len(encoded) - 1
    with pytest.raises(InvalidEncodingError, match="invalid decoded size: "):
        b58decode(encoded, wrong_length)

    invalid_checksum = encoded[:-4] + "1111"
    with pytest.raises(InvalidEncodingError, match="invalid checksum: "):
        b58decode(invalid_checksum, 4)

    err_msg = "'ascii' codec can't encode character "
    with pytest.raises(UnicodeEncodeError, match=err_msg):
        b58decode("hèllo world")

    err_msg = "not enough bytes for checksum, invalid base58 decoded size: "
    with pytest.raises(InvalidEncodingError, match=err_msg):
        b58decode(_b58encode(b"123"))

    err_msg = "Base58 string contains invalid characters"
    with pytest.raises(InvalidEncodingError, match=err_msg):
        b58decode("0OIl")

    with pytest.raises(EOSK1ValueError, match="invalid size: "):
        b58encode(b"hello world", 12)


def test_wif() -> None:
    # https://en.bitcoin.it/wiki/Wallet_import_format
    prv = 0xC28FCA386C7A227600B2FE50B7CAE11EC86D3BF1FBE471BE89827E19D72AA1D

    uncompressed_key = b"\x80" + prv.to_bytes(32, byteorder="big", signed=False)
    uncompressed_wif = "5HueCGU8rMjxEXxiPuD5BDku4MkFqeZyd4dZ1jvhTVqvbTLvyTJ"
    wif = b58encode(uncompressed_key)
    assert wif == uncompressed_wif
    key = b58decode(uncompressed_wif)
    assert key == uncompressed_key

    compressed_key = b"\x80" + prv.to_bytes(32, byteorder="big", signed=False) + b"\x01"
    compressed_wif = "KwdMAjGmerYanjeui5SHS7JkmpZvVipYvB2LJGU1ZxJwYvP98617"
    wif = b58encode(compressed_key)
    assert wif == compressed_wif
    key = b58decode(compressed_wif)
    assert key == compressed_key

    # bytes
    key = b58decode(compressed_wif.encode("ascii"))
    assert key == compressed_key


def test_integers() -> None:
    digits = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
    for i in range(len(digits)):
        char = digits[i : i + 1]
        assert _b58decode_to_int(char) == i
        assert _b58encode_from_int(i) == char
    number = (
        "0111d38e5fc9071ffcd20b4a763cc9ae4f252bb4e4"
        "8fd66a835e252ada93ff480d6dd43dc62a641155a5"
    )
    n = int(number, 16)
    assert _b58decode_to_int(digits) == n
    assert _b58encode_from_int(n) == digits[1:]


def test_ripemd160_checksum() -> None:
    b58_pub_key = EOS_PUB_KEY[3:]
    pub_key = b58decode_ripemd160(b58_pub_key, out_size=33)
    assert pub_key[0] in (2, 3)
    assert b58encode_ripemd160(pub_key) == b58_pub_key
    # the checksum is the truncated ripemd160 of the payload
    raw = _b58decode(b58_pub_key.encode("ascii"))
    assert raw == pub_key + ripemd160(pub_key)[:4]

    # the key type suffix enters the checksum
    b58_k1 = b58encode_ripemd160(pub_key, b"K1")
    assert b58_k1 != b58_pub_key
    assert b58decode_ripemd160(b58_k1, b"K1", 33) == pub_key
    raw = _b58decode(b58_k1.encode("ascii"))
    assert raw == pub_key + ripemd160(pub_key + b"K1")[:4]

    with pytest.raises(InvalidEncodingError, match="invalid checksum: "):
        b58decode_ripemd160(b58_k1)
    with pytest.raises(InvalidEncodingError, match="invalid checksum: "):
        b58decode_ripemd160(b58_pub_key, b"K1")

    err_msg = "valid checksum, invalid decoded size: "
    with pytest.raises(InvalidEncodingError, match=err_msg):
        b58decode_ripemd160(b58_pub_key, out_size=32)
