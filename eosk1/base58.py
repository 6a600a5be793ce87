#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Base58 encoding and decoding functions.

Base58 omits the similar-looking letters
0 (zero), O (capital o), I (capital i), and l (lower case L)
to avoid ambiguity when printed; moreover, it removes '+' and '/'
so that a double-click does select the whole string.

Two checksummed flavours are used for EOS keys and signatures:

* Base58Check, using hash256(v)[:4] as checksum suffix;
  it is used by WIF private keys.
* RIPEMD160 checksum, using ripemd160(v + suffix)[:4],
  where the suffix is the key type (e.g. b"K1") or empty;
  it is used by EOS public keys, PVT_K1_ private keys,
  and SIG_K1_ signatures.

At the decoding stage the checksum validity ensures data integrity.
"""

from typing import Callable, Optional

from eosk1.alias import Octets, String
from eosk1.exceptions import InvalidEncodingError
from eosk1.hashes import hash256, ripemd160
from eosk1.utils import bytes_from_octets

_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
__BASE = len(_ALPHABET)
_CHECKSUM_SIZE = 4


def _b58encode_from_int(i: int) -> bytes:

    result = b""
    while i or len(result) == 0:
        i, idx = divmod(i, __BASE)
        result = _ALPHABET[idx : idx + 1] + result

    return result


def _b58encode(v: bytes) -> bytes:

    # preserve leading-0s
    # leading-0s become base58 leading-1s
    n_pad = len(v)
    v = v.lstrip(b"\0")
    vlen = len(v)
    n_pad -= vlen
    result = _ALPHABET[:1] * n_pad

    if vlen:
        i = int.from_bytes(v, byteorder="big", signed=False)
        result += _b58encode_from_int(i)

    return result


def _b58decode_to_int(v: bytes) -> int:

    i = 0
    for char in v:
        i *= __BASE
        i += _ALPHABET.index(char)
    return i


def _b58decode(v: bytes) -> bytes:

    if any(x not in _ALPHABET for x in v):
        msg = "Base58 string contains invalid characters"
        raise InvalidEncodingError(msg)

    # preserve leading-0s
    # base58 leading-1s become leading-0s
    n_pad = len(v)
    v = v.lstrip(_ALPHABET[:1])
    vlen = len(v)
    n_pad -= vlen
    result = b"\0" * n_pad

    if vlen:
        i = _b58decode_to_int(v)
        nbytes = (i.bit_length() + 7) // 8
        result = result + i.to_bytes(nbytes, byteorder="big", signed=False)

    return result


def _ripemd160_checksum(suffix: bytes) -> Callable[[bytes], bytes]:
    def checksum(v: bytes) -> bytes:
        return ripemd160(v + suffix)[:_CHECKSUM_SIZE]

    return checksum


def _hash256_checksum(v: bytes) -> bytes:
    return hash256(v)[:_CHECKSUM_SIZE]


def _encode_with_checksum(v: bytes, checksum: Callable[[bytes], bytes]) -> str:
    return _b58encode(v + checksum(v)).decode("ascii")


def _decode_with_checksum(
    v: String, checksum: Callable[[bytes], bytes], out_size: Optional[int]
) -> bytes:

    if isinstance(v, str):
        # do not trim spaces
        v = v.encode("ascii")

    result = _b58decode(v)
    if len(result) < _CHECKSUM_SIZE:
        err_msg = "not enough bytes for checksum, "
        err_msg += f"invalid base58 decoded size: {len(result)}"
        raise InvalidEncodingError(err_msg)

    result, checked = result[:-_CHECKSUM_SIZE], result[-_CHECKSUM_SIZE:]
    expected = checksum(result)
    if checked != expected:
        err_msg = f"invalid checksum: 0x{checked.hex()} instead of 0x{expected.hex()}"
        raise InvalidEncodingError(err_msg)

    if out_size is None or len(result) == out_size:
        return result

    err_msg = "valid checksum, invalid decoded size: "
    err_msg += f"{len(result)} bytes instead of {out_size}"
    raise InvalidEncodingError(err_msg)


def b58encode(v: Octets, in_size: Optional[int] = None) -> str:
    """Encode a bytes-like object using Base58Check."""

    v = bytes_from_octets(v, in_size)
    return _encode_with_checksum(v, _hash256_checksum)


def b58decode(v: String, out_size: Optional[int] = None) -> bytes:
    """Decode a Base58Check encoded bytes-like object or ASCII string.

    Optionally, it also ensures required output size.
    """
    return _decode_with_checksum(v, _hash256_checksum, out_size)


def b58encode_ripemd160(v: Octets, suffix: bytes = b"") -> str:
    """Encode a bytes-like object using Base58 and RIPEMD160 checksum.

    The checksum is ripemd160(v + suffix)[:4]:
    the suffix is the key type (e.g. b"K1"), empty for legacy keys.
    """

    v = bytes_from_octets(v)
    return _encode_with_checksum(v, _ripemd160_checksum(suffix))


def b58decode_ripemd160(
    v: String, suffix: bytes = b"", out_size: Optional[int] = None
) -> bytes:
    """Decode a Base58 encoded object with RIPEMD160 checksum."""
    return _decode_with_checksum(v, _ripemd160_checksum(suffix), out_size)
