#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Functions for conversions between different key formats.

Private keys:

- integer (native int)
- Octets (32 bytes or hex-string)
- WIF, i.e. Base58Check(0x80 || q), e.g.
  "5KQwrPbwdL6PhXujxW37FSSQZ1JiwsST4cqQzDeyXtP79zkvFD3"
- "PVT_K1_" || Base58(q || RIPEMD160(q || "K1")[:4])

Public keys:

- CurvePoint
- SEC Octets (bytes or hex-string, with 02, 03, or 04 prefix)
- "EOS" || Base58(P || RIPEMD160(P)[:4]), P being the compressed SEC key, e.g.
  "EOS6MRyAjQq8ud7hVNYcfnVPJqcVpscN5So8BhtHuGYqET5GDW5CV"
- "PUB_K1_" || Base58(P || RIPEMD160(P || "K1")[:4])
"""

import secrets
from typing import Union

from eosk1.alias import String
from eosk1.base58 import (
    b58decode,
    b58decode_ripemd160,
    b58encode,
    b58encode_ripemd160,
)
from eosk1.ecc.curve import Curve, secp256k1
from eosk1.ecc.point import CurvePoint
from eosk1.ecc.sec_point import bytes_from_point, point_from_octets
from eosk1.exceptions import EOSK1TypeError, EOSK1ValueError, InvalidEncodingError
from eosk1.hashes import sha256
from eosk1.utils import bytes_from_octets, int_repr

# private key inputs:
# integer as int
# Octets as bytes or hex-string
# WIF or PVT_K1_ as str
PrvKey = Union[int, bytes, str]

# public key inputs:
# CurvePoint
# SEC Octets as bytes or hex-string
# EOS or PUB_K1_ as str
# or any private key input
Key = Union[int, bytes, str, CurvePoint]

WIF_VERSION = b"\x80"
# trailing marker of WIF keys for compressed public key derivation
WIF_COMPRESSED = b"\x01"

EOS_PREFIX = "EOS"
PVT_K1_PREFIX = "PVT_K1_"
PUB_K1_PREFIX = "PUB_K1_"
K1_SUFFIX = b"K1"


def _assert_valid_q(q: int, ec: Curve) -> int:
    if not 0 < q < ec.n:
        raise EOSK1ValueError(f"private key not in 1..n-1: {int_repr(q)}")
    return q


def prv_key_from_wif(wif: String, ec: Curve = secp256k1) -> int:
    """Return the private key integer from a WIF string.

    The trailing 0x01 compressed marker is accepted.
    """

    if isinstance(wif, str):
        wif = wif.strip()
    payload = b58decode(wif)

    if payload[:1] != WIF_VERSION:
        err_msg = f"invalid WIF version: {payload[:1].hex()}"
        err_msg += f", instead of {WIF_VERSION.hex()}"
        raise InvalidEncodingError(err_msg)

    if len(payload) == ec.n_size + 2:
        if payload[-1:] != WIF_COMPRESSED:
            err_msg = f"invalid WIF compressed marker: {payload[-1:].hex()}"
            raise InvalidEncodingError(err_msg)
        payload = payload[:-1]
    elif len(payload) != ec.n_size + 1:
        raise InvalidEncodingError(f"invalid WIF size: {len(payload)}")

    q = int.from_bytes(payload[1:], byteorder="big", signed=False)
    return _assert_valid_q(q, ec)


def prv_key_from_pvt_k1(pvt_k1: String, ec: Curve = secp256k1) -> int:
    "Return the private key integer from a PVT_K1_ string."

    if isinstance(pvt_k1, bytes):
        pvt_k1 = pvt_k1.decode("ascii")
    pvt_k1 = pvt_k1.strip()
    if not pvt_k1.startswith(PVT_K1_PREFIX):
        raise InvalidEncodingError(f"missing {PVT_K1_PREFIX} prefix: {pvt_k1}")

    payload = b58decode_ripemd160(pvt_k1[len(PVT_K1_PREFIX) :], K1_SUFFIX, ec.n_size)
    q = int.from_bytes(payload, byteorder="big", signed=False)
    return _assert_valid_q(q, ec)


def int_from_prv_key(prv_key: PrvKey, ec: Curve = secp256k1) -> int:
    """Return a verified-as-valid private key integer.

    It supports:

    - WIF (string)
    - PVT_K1_ (string)
    - Octets (bytes or hex-string) of ec.n_size
    - integer (native int)
    """

    if isinstance(prv_key, bool) or not isinstance(prv_key, (int, bytes, str)):
        raise EOSK1TypeError(f"not a private key: {prv_key!r}")

    if isinstance(prv_key, int):
        return _assert_valid_q(prv_key, ec)

    if isinstance(prv_key, str):
        prv_key = prv_key.strip()
        if prv_key.startswith(PVT_K1_PREFIX):
            return prv_key_from_pvt_k1(prv_key, ec)

    # it must be octets
    try:
        prv_key_bytes = bytes_from_octets(prv_key, ec.n_size)
    except ValueError as e:
        # not an hex-string, it could be a WIF
        if isinstance(prv_key, str):
            try:
                return prv_key_from_wif(prv_key, ec)
            except EOSK1ValueError:
                pass
        raise EOSK1ValueError(f"not a private key: {prv_key!r}") from e

    q = int.from_bytes(prv_key_bytes, byteorder="big", signed=False)
    return _assert_valid_q(q, ec)


def gen_prv_key(ec: Curve = secp256k1) -> int:
    "Return a random private key, i.e. an integer in 1..n-1."
    return 1 + secrets.randbelow(ec.n - 1)


def prv_key_from_seed(seed: String, ec: Curve = secp256k1) -> int:
    "Return the private key as SHA256 of the seed string."

    if isinstance(seed, str):
        seed = seed.encode()
    q = int.from_bytes(sha256(seed), byteorder="big", signed=False)
    return _assert_valid_q(q, ec)


def wif_from_prv_key(prv_key: PrvKey, ec: Curve = secp256k1) -> str:
    "Return the WIF encoding of a private key."

    q = int_from_prv_key(prv_key, ec)
    payload = WIF_VERSION + q.to_bytes(ec.n_size, byteorder="big", signed=False)
    return b58encode(payload)


def pvt_k1_from_prv_key(prv_key: PrvKey, ec: Curve = secp256k1) -> str:
    "Return the PVT_K1_ encoding of a private key."

    q = int_from_prv_key(prv_key, ec)
    payload = q.to_bytes(ec.n_size, byteorder="big", signed=False)
    return PVT_K1_PREFIX + b58encode_ripemd160(payload, K1_SUFFIX)


def point_from_eos_pub_key(
    pub_key: String, prefix: str = EOS_PREFIX, ec: Curve = secp256k1
) -> CurvePoint:
    "Return the public key point from an EOS (legacy format) string."

    if isinstance(pub_key, bytes):
        pub_key = pub_key.decode("ascii")
    pub_key = pub_key.strip()
    if not pub_key.startswith(prefix):
        raise InvalidEncodingError(f"missing {prefix} prefix: {pub_key}")

    payload = b58decode_ripemd160(pub_key[len(prefix) :], out_size=ec.p_size + 1)
    return point_from_octets(payload, ec)


def point_from_pub_k1(pub_key: String, ec: Curve = secp256k1) -> CurvePoint:
    "Return the public key point from a PUB_K1_ string."

    if isinstance(pub_key, bytes):
        pub_key = pub_key.decode("ascii")
    pub_key = pub_key.strip()
    if not pub_key.startswith(PUB_K1_PREFIX):
        raise InvalidEncodingError(f"missing {PUB_K1_PREFIX} prefix: {pub_key}")

    payload = b58decode_ripemd160(
        pub_key[len(PUB_K1_PREFIX) :], K1_SUFFIX, ec.p_size + 1
    )
    return point_from_octets(payload, ec)


def point_from_key(key: Key, ec: Curve = secp256k1) -> CurvePoint:
    """Return a CurvePoint from any possible key representation.

    It supports:

    - CurvePoint
    - SEC Octets (bytes or hex-string, with 02, 03, or 04 prefix)
    - EOS and PUB_K1_ strings
    - any private key representation (see int_from_prv_key)
    """

    if isinstance(key, CurvePoint):
        ec.require_on_curve(key)
        if key.is_infinity:
            raise EOSK1ValueError("invalid infinity point as public key")
        return key

    if isinstance(key, str):
        key = key.strip()
        if key.startswith(PUB_K1_PREFIX):
            return point_from_pub_k1(key, ec)
        if key.startswith(EOS_PREFIX):
            return point_from_eos_pub_key(key, EOS_PREFIX, ec)

    if not isinstance(key, int):
        try:
            size = len(bytes_from_octets(key))
        except ValueError:
            size = 0
        if size in (ec.p_size + 1, 2 * ec.p_size + 1):
            return point_from_octets(key, ec)

    q = int_from_prv_key(key, ec)
    return ec.generator().mult(q)


def pub_key_from_prv_key(
    prv_key: PrvKey, compressed: bool = True, ec: Curve = secp256k1
) -> bytes:
    "Return the SEC public key derived from a private key."

    q = int_from_prv_key(prv_key, ec)
    return bytes_from_point(ec.generator().mult(q), compressed)


def eos_pub_key_from_key(
    key: Key, prefix: str = EOS_PREFIX, ec: Curve = secp256k1
) -> str:
    "Return the EOS (legacy format) public key string."

    pub_key = bytes_from_point(point_from_key(key, ec), compressed=True)
    return prefix + b58encode_ripemd160(pub_key)


def pub_k1_from_key(key: Key, ec: Curve = secp256k1) -> str:
    "Return the PUB_K1_ public key string."

    pub_key = bytes_from_point(point_from_key(key, ec), compressed=True)
    return PUB_K1_PREFIX + b58encode_ripemd160(pub_key, K1_SUFFIX)


def sec_from_key(key: Key, compressed: bool = True, ec: Curve = secp256k1) -> bytes:
    "Return the SEC public key from any possible key representation."
    return bytes_from_point(point_from_key(key, ec), compressed)

