#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Strict ASN.1 DER format for ECDSA signature representation.

OpenSSL does not do strict validation of DER signatures
(e.g. extra padding is ignored), leading to signature malleability.
BIP66 mandates a strict DER format, adopted here:

source:
https://github.com/bitcoin/bips/blob/master/bip-0066.mediawiki

Format:
[0x30] [data-size][0x02][r-size][r][0x02][s-size][s]

* 0x30: header byte to indicate compound structure
* data-size: 1-byte size descriptor of the following data
* 0x02: header byte indicating an integer
* r-size: 1-byte size descriptor of the r value that follows
* r: arbitrary-size big-endian r value.
    It must use the shortest possible encoding for
    a positive integers: no null bytes at the start,
    except a single one when the next byte has its highest bit set
    (to avoid being interpreted as a negative number)
* 0x02: header byte indicating an integer
* s-size: 1-byte size descriptor of the s value that follows
* s: arbitrary-size big-endian s value. Same rules as for r apply

Only the short form of the DER length is supported:
sizes are always less than 0x80.

The ECDSA signature (r, s) should be 64 bytes,
r and s being 32 bytes integers each;
however, integers in DER are signed,
so if the highest bit of the value being encoded is set,
a 33rd byte is added in front.
EOS signatures are canonical only if r and s are 32 bytes DER integers.
"""

from io import BytesIO
from typing import Tuple

from eosk1.alias import BinaryData
from eosk1.exceptions import EOSK1ValueError, InvalidEncodingError
from eosk1.utils import bytesio_from_binarydata

_DER_SCALAR_MARKER = b"\x02"
_DER_SIG_MARKER = b"\x30"


def der_scalar_size(scalar: int) -> int:
    "Return the size of the DER integer, 'highest bit set' padding included."
    return scalar.bit_length() // 8 + 1


def _serialize_size(size: int) -> bytes:
    if size >= 0x80:
        raise EOSK1ValueError(f"DER long form size not supported: {size}")
    return size.to_bytes(1, byteorder="big", signed=False)


def _parse_size(stream: BytesIO) -> int:
    size_byte = stream.read(1)
    if not size_byte:
        raise InvalidEncodingError("missing DER size")
    size = size_byte[0]
    if size == 0:
        raise InvalidEncodingError("zero size")
    if size >= 0x80:
        raise InvalidEncodingError(f"invalid DER size: {size}")
    return size


def serialize_scalar(scalar: int) -> bytes:
    "Serialize a positive scalar as DER integer."

    if scalar < 1:
        raise EOSK1ValueError(f"not a positive scalar: {scalar}")
    # 'highest bit set' padding included here
    scalar_size = der_scalar_size(scalar)
    scalar_bytes = scalar.to_bytes(scalar_size, byteorder="big", signed=False)
    return _DER_SCALAR_MARKER + _serialize_size(scalar_size) + scalar_bytes


def _parse_scalar(sig_data_stream: BytesIO) -> int:

    marker = sig_data_stream.read(1)
    if marker != _DER_SCALAR_MARKER:
        err_msg = f"invalid value header: {marker.hex()}"
        err_msg += f", instead of integer element {_DER_SCALAR_MARKER.hex()}"
        raise InvalidEncodingError(err_msg)

    size = _parse_size(sig_data_stream)
    r_bytes = sig_data_stream.read(size)
    if len(r_bytes) != size:
        err_msg = f"not enough bytes for scalar: {len(r_bytes)} instead of {size}"
        raise InvalidEncodingError(err_msg)
    if r_bytes[0] >= 0x80:
        raise InvalidEncodingError("invalid negative scalar")
    if r_bytes[0] == 0 and (size == 1 or r_bytes[1] < 0x80):
        raise InvalidEncodingError("invalid 'highest bit set' padding")

    return int.from_bytes(r_bytes, byteorder="big", signed=False)


def serialize_sig(r: int, s: int) -> bytes:
    "Serialize an ECDSA signature to strict ASN.1 DER representation."

    out = serialize_scalar(r)
    out += serialize_scalar(s)
    return _DER_SIG_MARKER + _serialize_size(len(out)) + out


def parse_sig(data: BinaryData) -> Tuple[int, int]:
    """Return (r, s) by parsing binary data.

    Deserialize a strict ASN.1 DER representation of an ECDSA signature.
    """

    stream = bytesio_from_binarydata(data)

    # [0x30] [data-size][0x02][r-size][r][0x02][s-size][s]
    marker = stream.read(1)
    if marker != _DER_SIG_MARKER:
        err_msg = f"invalid compound header: {marker.hex()}"
        err_msg += f", instead of DER sequence tag {_DER_SIG_MARKER.hex()}"
        raise InvalidEncodingError(err_msg)

    # [data-size][0x02][r-size][r][0x02][s-size][s]
    size = _parse_size(stream)
    sig_data = stream.read(size)
    if len(sig_data) != size:
        err_msg = f"not enough bytes: {len(sig_data)} instead of {size}"
        raise InvalidEncodingError(err_msg)

    # [0x02][r-size][r][0x02][s-size][s]
    sig_data_substream = BytesIO(sig_data)
    r = _parse_scalar(sig_data_substream)
    s = _parse_scalar(sig_data_substream)

    # to prevent malleability
    # the sig_data_substream must have been consumed entirely
    if sig_data_substream.read(1) != b"":
        raise InvalidEncodingError("invalid DER sequence length")
    if stream.read(1) != b"":
        raise InvalidEncodingError("trailing bytes after DER sequence")

    return r, s
