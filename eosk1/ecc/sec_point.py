#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""SEC compressed/uncompressed point representation.

The single 0x00 byte represents the infinity point,
as in SEC 1 v.2, section 2.3.3.
"""

from typing import Optional

from eosk1.alias import Octets
from eosk1.ecc.curve import Curve, secp256k1
from eosk1.ecc.point import CurvePoint
from eosk1.exceptions import EOSK1ValueError, InvalidEncodingError
from eosk1.utils import bytes_from_octets, hex_string


def bytes_from_point(Q: CurvePoint, compressed: Optional[bool] = None) -> bytes:
    """Return a point as compressed/uncompressed octet sequence.

    Return a point as compressed (0x02, 0x03) or uncompressed (0x04)
    octet sequence, according to SEC 1 v.2, section 2.3.3.
    If compressed is None, the point's own compressed flag is used.
    """

    if Q.is_infinity:
        return b"\x00"

    if compressed is None:
        compressed = Q.compressed

    ec = Q.ec
    x_Q, y_Q = Q.affine()
    bytes_ = x_Q.to_bytes(ec.p_size, byteorder="big", signed=False)
    if compressed:
        return (b"\x03" if (y_Q & 1) else b"\x02") + bytes_

    return b"\x04" + bytes_ + y_Q.to_bytes(ec.p_size, byteorder="big", signed=False)


def point_from_octets(pub_key: Octets, ec: Curve = secp256k1) -> CurvePoint:
    """Return a CurvePoint that belongs to the curve.

    Return a CurvePoint that belongs to the curve according to
    SEC 1 v.2, section 2.3.4.
    """

    try:
        pub_key = bytes_from_octets(pub_key)
    except ValueError as e:
        raise InvalidEncodingError(f"not an octet sequence: {pub_key!r}") from e

    bsize = len(pub_key)  # bytes
    if bsize == 0:
        raise InvalidEncodingError("empty point encoding")

    if pub_key[0] == 0x00:  # infinity point
        if bsize != 1:
            err_msg = f"invalid size for infinity point: {bsize} instead of 1"
            raise InvalidEncodingError(err_msg)
        return ec.infinity()

    if pub_key[0] in (0x02, 0x03):  # compressed point
        if bsize != ec.p_size + 1:
            err_msg = "invalid size for compressed point: "
            err_msg += f"{bsize} instead of {ec.p_size + 1}"
            raise InvalidEncodingError(err_msg)
        x_Q = int.from_bytes(pub_key[1:], byteorder="big", signed=False)
        try:
            # also check x_Q validity
            return ec.point_from_x(pub_key[0] & 1, x_Q)
        except EOSK1ValueError as e:
            err_msg = f"invalid x-coordinate: '{hex_string(x_Q)}'"
            raise InvalidEncodingError(err_msg) from e

    if pub_key[0] == 0x04:  # uncompressed point
        if bsize != 2 * ec.p_size + 1:
            err_msg = "invalid size for uncompressed point: "
            err_msg += f"{bsize} instead of {2 * ec.p_size + 1}"
            raise InvalidEncodingError(err_msg)
        x_Q = int.from_bytes(pub_key[1 : ec.p_size + 1], byteorder="big", signed=False)
        y_Q = int.from_bytes(pub_key[ec.p_size + 1 :], byteorder="big", signed=False)
        if not (x_Q < ec.p and y_Q < ec.p):
            raise InvalidEncodingError("coordinate not in 0..p-1")
        Q = CurvePoint(ec, x_Q, y_Q, 1, compressed=False)
        if ec.is_on_curve(Q):
            return Q
        raise InvalidEncodingError(f"point not on curve: {Q}")

    raise InvalidEncodingError(f"not a point: {pub_key!r}")
