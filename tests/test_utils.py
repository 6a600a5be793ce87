#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `eosk1.utils` module."

import secrets
from io import BytesIO

import pytest

from eosk1.exceptions import EOSK1ValueError
from eosk1.utils import (
    bytes_from_octets,
    bytesio_from_binarydata,
    hex_string,
    int_from_bits,
    int_from_integer,
    int_repr,
)


def test_int_from_integer() -> None:
    for i in (
        secrets.randbits(256 - 8),
        0x0B6CA75B7D3076C561958CCED813797F6D2275C7F42F3856D007D587769A90,
    ):
        assert i == int_from_integer(i)
        assert i == int_from_integer(" " + hex(i).upper())
        assert -i == int_from_integer(hex(-i).upper() + " ")
        assert i == int_from_integer(hex_string(i))
        assert i == int_from_integer(i.to_bytes(32, byteorder="big", signed=False))


def test_hex_string() -> None:
    int_ = 34492435054806958080
    assert hex_string(int_) == "01 DEADBEEF 00000000"
    assert hex_string(hex(int_).lower()) == "01 DEADBEEF 00000000"

    assert hex_string(0) == "00"
    assert hex_string(0xFFFFFFFF) == "FFFFFFFF"
    assert hex_string(2**32) == "01 00000000"

    a_str = "01de adbeef00000000"
    assert hex_string(a_str) == "01 DEADBEEF 00000000"
    a_bytes = bytes.fromhex(a_str)
    assert hex_string(a_bytes) == "01 DEADBEEF 00000000"

    # invalid hex-string: odd number of hex digits
    a_str = "1deadbeef00000000"
    with pytest.raises(ValueError, match="non-hexadecimal number found in fromhex"):
        hex_string(a_str)

    int_ = -1
    with pytest.raises(EOSK1ValueError, match="negative integer: "):
        hex_string(int_)


def test_int_repr() -> None:
    assert int_repr(0) == "0"
    assert int_repr(0xFFFFFFFF) == "4294967295"
    assert int_repr(0x1FFFFFFFF) == "'01 FFFFFFFF'"


def test_bytes_from_octets() -> None:
    assert bytes_from_octets("deadbeef") == b"\xde\xad\xbe\xef"
    assert bytes_from_octets(" de ad be ef ") == b"\xde\xad\xbe\xef"
    assert bytes_from_octets(b"\xde\xad\xbe\xef", 4) == b"\xde\xad\xbe\xef"
    assert bytes_from_octets("deadbeef", (33, 4)) == b"\xde\xad\xbe\xef"

    with pytest.raises(EOSK1ValueError, match="invalid size: 4 bytes instead of 5"):
        bytes_from_octets("deadbeef", 5)
    with pytest.raises(EOSK1ValueError, match="invalid size: "):
        bytes_from_octets("deadbeef", (33, 65))

    with pytest.raises(ValueError, match="non-hexadecimal number found in fromhex"):
        bytes_from_octets("not an hex-string")


def test_bytesio_from_binarydata() -> None:
    stream = bytesio_from_binarydata("deadbeef")
    assert stream.read() == b"\xde\xad\xbe\xef"
    stream = bytesio_from_binarydata(b"\xde\xad\xbe\xef")
    assert stream.read(2) == b"\xde\xad"

    stream = BytesIO(b"\xde\xad\xbe\xef")
    assert bytesio_from_binarydata(stream) is stream


def test_int_from_bits() -> None:
    octets = b"\xff" * 32
    assert int_from_bits(octets, 256) == 2**256 - 1
    assert int_from_bits(octets, 255) == 2**255 - 1
    assert int_from_bits(octets, 4) == 0xF
    # nlen greater than the available bits
    assert int_from_bits(octets, 512) == 2**256 - 1
    assert int_from_bits("80" + "00" * 31, 1) == 1
