#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Conversion helpers shared by keys, points, and signatures.

Binary inputs (private keys, SEC points, DER and compact signatures,
decoded Base58 payloads) are accepted both as bytes and as hex-strings;
integers (curve parameters, scalars) also as hex-strings or bytes.
"""

from collections.abc import Iterable as IterableCollection
from io import BytesIO
from typing import Iterable, Optional, Union

from eosk1.alias import BinaryData, Integer, Octets
from eosk1.exceptions import EOSK1ValueError

# integers above this are shown as hex-strings in error messages
HEX_THRESHOLD = 0xFFFFFFFF

NoneOneOrMoreInt = Optional[Union[int, Iterable[int]]]


def _has_size(data: bytes, out_size: NoneOneOrMoreInt) -> bool:
    if out_size is None:
        return True
    if isinstance(out_size, int):
        return len(data) == out_size
    if isinstance(out_size, IterableCollection):
        return len(data) in out_size
    return False


def bytes_from_octets(octets: Octets, out_size: NoneOneOrMoreInt = None) -> bytes:
    """Return bytes from bytes or hex-string (spaces are ignored).

    out_size, if given, is the required size
    (e.g. 32 for a private key) or the collection of
    accepted sizes (e.g. (33, 65) for a SEC public key).
    """

    data = bytes.fromhex(octets) if isinstance(octets, str) else octets
    if not _has_size(data, out_size):
        err_msg = f"invalid size: {len(data)} bytes instead of {out_size}"
        raise EOSK1ValueError(err_msg)
    return data


def bytesio_from_binarydata(stream: BinaryData) -> BytesIO:
    "Return a stream to parse, e.g. a compact or DER signature, from."

    if isinstance(stream, str):
        stream = bytes_from_octets(stream)
    if isinstance(stream, bytes):
        return BytesIO(stream)
    # already a stream
    return stream


def int_from_bits(octets: Octets, nlen: int) -> int:
    """Return the integer of the leftmost nlen bits of octets.

    It turns a message hash (or an RFC6979 candidate) into
    a non-negative integer less than 2^nlen,
    as in SEC 1 v.2 section 4.1.3 (5) and
    https://tools.ietf.org/html/rfc6979#section-2.3.2;
    no reduction modulo n is performed.
    """

    data = bytes_from_octets(octets)
    excess_bits = max(len(data) * 8 - nlen, 0)
    return int.from_bytes(data, byteorder="big", signed=False) >> excess_bits


def int_from_integer(i: Integer) -> int:
    """Return an int from int, "0x"-prefixed hex, hex-string, or bytes.

    E.g. 3735928559, "-0xdeadbeef", "de ad be ef", b"\\xde\\xad\\xbe\\xef".
    Only the int and the "0x"-prefixed forms can be negative.
    """

    if isinstance(i, int):
        return i

    if isinstance(i, str):
        i = i.strip().lower()
        if i.startswith(("0x", "-0x")):
            return int(i, 16)
        i = bytes.fromhex(i)

    return int.from_bytes(i, byteorder="big", signed=False)


def hex_string(i: Integer) -> str:
    """Return the upper case hex-string of a non-negative integer.

    Full bytes only, grouped four bytes at a time from the right,
    e.g. "01 DEADBEEF 00000000".
    """

    int_ = int_from_integer(i)
    if int_ < 0:
        raise EOSK1ValueError(f"negative integer: {int_}")

    size = max(1, (int_.bit_length() + 7) // 8)
    digits = int_.to_bytes(size, byteorder="big", signed=False).hex().upper()
    head = len(digits) % 8
    groups = [digits[:head]] if head else []
    groups += [digits[j : j + 8] for j in range(head, len(digits), 8)]
    return " ".join(groups)


def int_repr(i: int) -> str:
    "Return the error-message representation of an integer."
    return f"'{hex_string(i)}'" if i > HEX_THRESHOLD else f"{i}"
