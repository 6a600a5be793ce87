#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Elliptic Curve Digital Signature Algorithm (ECDSA).

Implementation according to SEC 1 v.2:

http://www.secg.org/sec1-v2.pdf

specialized with canonical 'lower-s' form
to avoid accepting malleable signatures,
and with the public key recovery id (key_id) of the signature:

- bit 0 is the parity of the y-coordinate of the ephemeral point K
- bit 1 is set if the x-coordinate of K is not less than n
  (i.e. r = x_K - n)
"""

import contextlib
import hashlib
import logging
from dataclasses import InitVar, dataclass, field
from typing import List, Optional, Tuple, Type, Union

from dataclasses_json import DataClassJsonMixin, config

from eosk1.alias import BinaryData, HashF, Octets
from eosk1.ecc.curve import CURVES, Curve, secp256k1
from eosk1.ecc.der import parse_sig, serialize_sig
from eosk1.ecc.number_theory import mod_inv
from eosk1.ecc.point import CurvePoint
from eosk1.ecc.rfc6979 import MAX_NONCE_ITERATIONS, challenge_, rfc6979_nonce_
from eosk1.exceptions import (
    DegenerateNonceError,
    EOSK1RuntimeError,
    EOSK1ValueError,
    InvalidEncodingError,
    InvalidRecoveryIdError,
    RecoveryFailedError,
)
from eosk1.hashes import reduce_to_hlen
from eosk1.keys import Key, PrvKey, gen_prv_key, int_from_prv_key, point_from_key
from eosk1.utils import bytes_from_octets, int_repr

logger = logging.getLogger(__name__)

# compact signature header: 27 + key_id (+ 4 if compressed)
_COMPACT_HEADER_BASE = 27
_COMPACT_HEADER_COMPRESSED = 4


@dataclass(frozen=True)
class Sig(DataClassJsonMixin):
    """ECDSA signature, with optional public key recovery id.

    - r is a scalar, 0 < r < ec.n
    - s is a scalar, 0 < s < ec.n
    - key_id is None or in 0..3

    (ec.n is the curve order)

    Serializations are strict ASN.1 DER (see der.py)
    and the compact 65 bytes header || r || s,
    where header = 27 + key_id + 4 for compressed public keys.
    """

    # 32 bytes scalar
    r: int = field(metadata=config(encoder=hex, decoder=lambda v: int(v, 16)))
    # 32 bytes scalar
    s: int = field(metadata=config(encoder=hex, decoder=lambda v: int(v, 16)))
    key_id: Optional[int] = None
    ec: Curve = field(
        default=secp256k1,
        metadata=config(encoder=lambda v: v.name, decoder=lambda v: CURVES[v]),
    )
    check_validity: InitVar[bool] = True

    def __post_init__(self, check_validity: bool) -> None:
        if check_validity:
            self.assert_valid()

    def assert_valid(self) -> None:
        # r is a scalar, fail if r is not in [1, n-1]
        if not 0 < self.r < self.ec.n:
            raise EOSK1ValueError(f"scalar r not in 1..n-1: {int_repr(self.r)}")

        # ensure r is congruent to a valid x-coordinate
        r = self.r
        congruence_not_found = True
        while congruence_not_found and r < self.ec.p:
            try:
                self.ec.y(r)
                congruence_not_found = False
            except EOSK1ValueError:
                r += self.ec.n
        if congruence_not_found:
            err_msg = "r is not (congruent to) a valid x-coordinate: "
            err_msg += int_repr(self.r)
            raise EOSK1ValueError(err_msg)

        # s is a scalar, fail if s is not in [1, n-1]
        if not 0 < self.s < self.ec.n:
            raise EOSK1ValueError(f"scalar s not in 1..n-1: {int_repr(self.s)}")

        if self.key_id is not None and self.key_id not in (0, 1, 2, 3):
            raise InvalidRecoveryIdError(f"invalid key_id: {self.key_id}")

    def serialize(self, check_validity: bool = True) -> bytes:
        "Serialize an ECDSA signature to strict ASN.1 DER representation."

        if check_validity:
            self.assert_valid()
        return serialize_sig(self.r, self.s)

    @classmethod
    def parse(
        cls: Type["Sig"],
        data: BinaryData,
        ec: Curve = secp256k1,
        check_validity: bool = True,
    ) -> "Sig":
        """Return a Sig by parsing binary data.

        Deserialize a strict ASN.1 DER representation of an ECDSA signature.
        The recovery id is not part of the DER representation.
        """

        r, s = parse_sig(data)
        return cls(r, s, None, ec, check_validity)

    def serialize_compact(
        self, compressed: bool = True, check_validity: bool = True
    ) -> bytes:
        "Serialize to header || r || s, with 1 byte header."

        if check_validity:
            self.assert_valid()
        if self.key_id is None:
            raise InvalidRecoveryIdError("missing key_id")

        rf = _COMPACT_HEADER_BASE + self.key_id
        if compressed:
            rf += _COMPACT_HEADER_COMPRESSED
        n_size = self.ec.n_size
        out = rf.to_bytes(1, byteorder="big", signed=False)
        out += self.r.to_bytes(n_size, byteorder="big", signed=False)
        out += self.s.to_bytes(n_size, byteorder="big", signed=False)
        return out

    @classmethod
    def parse_compact(
        cls: Type["Sig"],
        data: Octets,
        ec: Curve = secp256k1,
        check_validity: bool = True,
    ) -> "Sig":
        "Return a Sig by parsing the header || r || s representation."

        try:
            data = bytes_from_octets(data, 1 + 2 * ec.n_size)
        except ValueError as e:
            raise InvalidEncodingError(f"invalid compact signature: {e}") from e

        rf = data[0]
        if not 27 <= rf <= 34:
            raise InvalidEncodingError(f"invalid compact signature header: {rf}")
        key_id = (rf - _COMPACT_HEADER_BASE) & 3
        r = int.from_bytes(data[1 : 1 + ec.n_size], byteorder="big", signed=False)
        s = int.from_bytes(data[1 + ec.n_size :], byteorder="big", signed=False)
        return cls(r, s, key_id, ec, check_validity)


def gen_keys(
    prv_key: Optional[PrvKey] = None, ec: Curve = secp256k1
) -> Tuple[int, CurvePoint]:
    "Return a private/public (int, CurvePoint) key-pair."

    if prv_key is None:
        # q in the range [1, ec.n-1]
        q = gen_prv_key(ec)
    else:
        q = int_from_prv_key(prv_key, ec)

    return q, ec.generator().mult(q)


def _sign_(c: int, q: int, nonce: int, lower_s: bool, ec: Curve) -> Sig:
    # Private function for testing purposes: it allows to explore all
    # possible value of the challenge c (for low-cardinality curves).
    # It assume that c is in [0, n-1], while q and nonce are in [1, n-1]
    # Steps numbering follows SEC 1 v.2 section 4.1.3

    K = ec.generator().mult(nonce)  # 1
    if K.is_infinity:
        raise DegenerateNonceError("failed to sign: K = INF")

    x_K, y_K = K.affine()
    # mod n makes it a scalar
    r = x_K % ec.n  # 2, 3
    if r == 0:  # r≠0 required as it multiplies the public key
        raise DegenerateNonceError("failed to sign: r = 0")

    s = mod_inv(nonce, ec.n) * (c + r * q) % ec.n  # 6
    if s == 0:  # s≠0 required as verify will need the inverse of s
        raise DegenerateNonceError("failed to sign: s = 0")

    key_id = y_K & 1
    if x_K >= ec.n:
        key_id |= 2

    # canonical 'low-s' encoding for ECDSA signatures:
    # s is negated, i.e. K is replaced by -K
    if lower_s and s > ec.n // 2:
        s = ec.n - s
        key_id ^= 1

    return Sig(r, s, key_id, ec)


def sign_(
    msg_hash: Octets,
    prv_key: PrvKey,
    nonce: Optional[PrvKey] = None,
    lower_s: bool = True,
    ec: Curve = secp256k1,
    hf: HashF = hashlib.sha256,
    retry: int = 0,
    max_iterations: int = MAX_NONCE_ITERATIONS,
) -> Sig:
    """Sign a hf_len bytes message according to ECDSA signature algorithm.

    If the deterministic nonce is not provided, the RFC6979
    nonce is used, perturbed by the retry counter:
    candidate nonces leading to r = 0 or s = 0 are skipped,
    and count against max_iterations as out of range ones do.
    """

    # the message msg_hash: a hf_len array
    hf_len = hf().digest_size
    msg_hash = bytes_from_octets(msg_hash, hf_len)

    # the secret key q: an integer in the range 1..n-1.
    # SEC 1 v.2 section 3.2.1
    q = int_from_prv_key(prv_key, ec)

    # the challenge
    c = challenge_(msg_hash, ec, hf)  # 4, 5

    if nonce is not None:
        nonce = int_from_prv_key(nonce, ec)
        return _sign_(c, q, nonce, lower_s, ec)

    # the first candidate nonce not leading to a degenerate signature
    sigs: List[Sig] = []

    def is_valid_nonce(k: int) -> bool:
        try:
            # second part delegated to helper function
            sigs.append(_sign_(c, q, k, lower_s, ec))
        except DegenerateNonceError as e:
            logger.debug("nonce candidate discarded: %s", e)
            return False
        return True

    rfc6979_nonce_(msg_hash, q, ec, hf, is_valid_nonce, retry, max_iterations)  # 1
    return sigs[0]


def sign(
    msg: Octets,
    prv_key: PrvKey,
    nonce: Optional[PrvKey] = None,
    lower_s: bool = True,
    ec: Curve = secp256k1,
    hf: HashF = hashlib.sha256,
    retry: int = 0,
) -> Sig:
    """ECDSA signature with canonical low-s preference.

    Implemented according to SEC 1 v.2
    The message msg is first processed by hf, yielding the value

        msg_hash = hf(msg),

    a sequence of bits of length *hf_len*.

    Normally, hf is chosen such that its output length *hf_len* is
    roughly equal to *nlen*, the bit-length of the group order *n*,
    since the overall security of the signature scheme will depend on
    the smallest of *hf_len* and *nlen*; however, the ECDSA standard
    supports all combinations of *hf_len* and *nlen*.

    RFC6979 is used for deterministic nonce.

    See https://tools.ietf.org/html/rfc6979#section-3.2
    """

    msg_hash = reduce_to_hlen(msg, hf)
    return sign_(msg_hash, prv_key, nonce, lower_s, ec, hf, retry)


def _assert_as_valid_(
    c: int, Q: CurvePoint, r: int, s: int, lower_s: bool, ec: Curve
) -> None:
    # Private function for test/dev purposes

    if lower_s and s > ec.n // 2:
        raise EOSK1ValueError("not a low s")

    w = mod_inv(s, ec.n)
    u = c * w % ec.n
    v = r * w % ec.n  # 4
    # Let K = u*G + v*Q.
    K = Q.double_mult(v, ec.generator(), u)  # 5

    # Fail if infinite(K).
    if K.is_infinity:  # 5
        raise EOSK1RuntimeError("invalid (INF) key")

    # Fail if r ≠ x_K %n.
    if r != K.x % ec.n:  # 6, 7, 8
        raise EOSK1RuntimeError("signature verification failed")


def _to_sig(sig: Union[Sig, Octets]) -> Sig:
    if isinstance(sig, Sig):
        sig.assert_valid()
        return sig
    return Sig.parse(sig)


def assert_as_valid_(
    msg_hash: Octets,
    key: Key,
    sig: Union[Sig, Octets],
    lower_s: bool = True,
    hf: HashF = hashlib.sha256,
) -> None:
    # Private function for test/dev purposes
    # It raises Errors, while verify should always return True or False

    sig = _to_sig(sig)
    c = challenge_(msg_hash, sig.ec, hf)  # 2, 3
    Q = point_from_key(key, sig.ec)
    # second part delegated to helper function
    _assert_as_valid_(c, Q, sig.r, sig.s, lower_s, sig.ec)


def assert_as_valid(
    msg: Octets,
    key: Key,
    sig: Union[Sig, Octets],
    lower_s: bool = True,
    hf: HashF = hashlib.sha256,
) -> None:
    # Private function for test/dev purposes
    # It raises Errors, while verify should always return True or False
    msg_hash = reduce_to_hlen(msg, hf)
    assert_as_valid_(msg_hash, key, sig, lower_s, hf)


def verify_(
    msg_hash: Octets,
    key: Key,
    sig: Union[Sig, Octets],
    lower_s: bool = True,
    hf: HashF = hashlib.sha256,
) -> bool:
    "ECDSA signature verification (SEC 1 v.2 section 4.1.4)."

    # all kind of Exceptions are catched because
    # verify must always return a bool
    try:
        assert_as_valid_(msg_hash, key, sig, lower_s, hf)
    except Exception:  # pylint: disable=broad-except
        return False

    return True


def verify(
    msg: Octets,
    key: Key,
    sig: Union[Sig, Octets],
    lower_s: bool = True,
    hf: HashF = hashlib.sha256,
) -> bool:
    "ECDSA signature verification (SEC 1 v.2 section 4.1.4)."
    msg_hash = reduce_to_hlen(msg, hf)
    return verify_(msg_hash, key, sig, lower_s, hf)


def _recover_pub_key_(
    key_id: int, c: int, r: int, s: int, ec: Curve, validate: bool = False
) -> CurvePoint:
    # Private function provided for testing purposes only.
    # Steps numbering follows SEC 1 v.2 section 4.1.6

    if key_id not in (0, 1, 2, 3):
        raise InvalidRecoveryIdError(f"invalid key_id: {key_id}")

    # r = x_K % ec.n
    # if ec.n <= x_K < ec.p then x_K = r + ec.n
    x_K = r + ec.n if key_id & 2 else r  # 1.1
    K = ec.point_from_x(key_id & 1, x_K)  # 1.2, 1.3, and 1.4

    # Q = r^-1 (s*K - c*G)
    # 1.5 has been performed in the calling function
    Q = K.double_mult(s, ec.generator(), -c % ec.n)  # 1.6.1
    Q = Q.mult(mod_inv(r, ec.n))

    if validate:
        if Q.is_infinity:
            raise EOSK1ValueError("invalid (INF) recovered key")
        ec.validate(Q)
    return Q


def _sig_key_id(sig: Sig, key_id: Optional[int]) -> int:
    if key_id is None:
        key_id = sig.key_id
    if key_id is None:
        raise InvalidRecoveryIdError("missing key_id")
    return key_id


def recover_pub_key_(
    key_id: Optional[int],
    msg_hash: Octets,
    sig: Union[Sig, Octets],
    hf: HashF = hashlib.sha256,
    validate: bool = False,
) -> CurvePoint:
    """ECDSA public key recovery (SEC 1 v.2 section 4.1.6).

    If key_id is None, the signature key_id is used.

    See also:
    - https://crypto.stackexchange.com/questions/18105/how-does-recovering-the-public-key-from-an-ecdsa-signature-work/18106#18106
    """

    sig = _to_sig(sig)
    key_id = _sig_key_id(sig, key_id)

    # The message msg_hash: a hf_len array
    hf_len = hf().digest_size
    msg_hash = bytes_from_octets(msg_hash, hf_len)

    c = challenge_(msg_hash, sig.ec, hf)  # 1.5

    return _recover_pub_key_(key_id, c, sig.r, sig.s, sig.ec, validate)


def recover_pub_key(
    key_id: Optional[int],
    msg: Octets,
    sig: Union[Sig, Octets],
    hf: HashF = hashlib.sha256,
    validate: bool = False,
) -> CurvePoint:
    """ECDSA public key recovery (SEC 1 v.2 section 4.1.6).

    See also:
    - https://crypto.stackexchange.com/questions/18105/how-does-recovering-the-public-key-from-an-ecdsa-signature-work/18106#18106
    """
    msg_hash = reduce_to_hlen(msg, hf)
    return recover_pub_key_(key_id, msg_hash, sig, hf, validate)


def recover_pub_keys_(
    msg_hash: Octets,
    sig: Union[Sig, Octets],
    lower_s: bool = True,
    hf: HashF = hashlib.sha256,
) -> List[CurvePoint]:
    "Return all the public keys, in key_id order, that verify the signature."

    sig = _to_sig(sig)

    # The message msg_hash: a hf_len array
    hf_len = hf().digest_size
    msg_hash = bytes_from_octets(msg_hash, hf_len)

    c = challenge_(msg_hash, sig.ec, hf)  # 1.5

    keys: List[CurvePoint] = []
    for key_id in range(4):
        with contextlib.suppress(EOSK1ValueError, EOSK1RuntimeError):
            Q = _recover_pub_key_(key_id, c, sig.r, sig.s, sig.ec)
            if not Q.is_infinity:
                _assert_as_valid_(c, Q, sig.r, sig.s, lower_s, sig.ec)
                keys.append(Q)
    return keys


def recover_pub_keys(
    msg: Octets,
    sig: Union[Sig, Octets],
    lower_s: bool = True,
    hf: HashF = hashlib.sha256,
) -> List[CurvePoint]:
    "Return all the public keys, in key_id order, that verify the signature."
    msg_hash = reduce_to_hlen(msg, hf)
    return recover_pub_keys_(msg_hash, sig, lower_s, hf)


def _calc_recovery_param_(c: int, r: int, s: int, Q: CurvePoint, ec: Curve) -> int:
    # Private function provided for testing purposes only.

    for key_id in range(4):
        with contextlib.suppress(EOSK1ValueError):
            if _recover_pub_key_(key_id, c, r, s, ec) == Q:
                return key_id

    err_msg = f"no key_id reproduces the public key: {Q}"
    raise RecoveryFailedError(err_msg)


def calc_recovery_param_(
    msg_hash: Octets,
    sig: Union[Sig, Octets],
    key: Key,
    hf: HashF = hashlib.sha256,
) -> int:
    "Return the first key_id in 0..3 recovering the given public key."

    sig = _to_sig(sig)
    c = challenge_(msg_hash, sig.ec, hf)
    Q = point_from_key(key, sig.ec)
    return _calc_recovery_param_(c, sig.r, sig.s, Q, sig.ec)


def calc_recovery_param(
    msg: Octets,
    sig: Union[Sig, Octets],
    key: Key,
    hf: HashF = hashlib.sha256,
) -> int:
    "Return the first key_id in 0..3 recovering the given public key."
    msg_hash = reduce_to_hlen(msg, hf)
    return calc_recovery_param_(msg_hash, sig, key, hf)
