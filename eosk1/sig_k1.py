#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""EOS K1 signatures.

EOS signs the SHA256 of the message with ECDSA over secp256k1,
with the public key recovery id embedded in the signature:
the public key is not needed at verification time,
as it is recovered from the signature itself.

The (r, s) DSA signature is serialized as
[1-byte recovery flag][32-bytes r][32-bytes s],
in a compact 65-bytes (fixed-size) encoding,
where the recovery flag is

    27 + 4 + key_id

EOS always uses compressed public keys, hence the +4;
key_id is the index in the [0, 3] range identifying which of the
recovered public keys is the signing one.

The compact encoding is then represented as string:

    "SIG_K1_" || Base58(data || RIPEMD160(data || "K1")[:4])

Moreover, EOS only accepts *canonical* signatures,
i.e. r and s must both be 32 bytes ASN.1 DER integers:
the highest bit must be zero, the highest byte must be non-zero.
The deterministic RFC6979 nonce is perturbed with a retry counter
until a canonical signature is found.
"""

import logging
from dataclasses import InitVar, dataclass
from typing import Type, Union

from eosk1.alias import BinaryData, Octets, String
from eosk1.base58 import b58decode_ripemd160, b58encode_ripemd160
from eosk1.ecc import dsa
from eosk1.ecc.curve import Curve, secp256k1
from eosk1.ecc.der import der_scalar_size
from eosk1.ecc.point import CurvePoint
from eosk1.exceptions import (
    EOSK1RuntimeError,
    EOSK1ValueError,
    InvalidEncodingError,
    IterationBudgetExceededError,
    NonCanonicalLengthError,
)
from eosk1.hashes import sha256
from eosk1.keys import K1_SUFFIX, Key, PrvKey, int_from_prv_key, point_from_key
from eosk1.utils import bytes_from_octets, bytesio_from_binarydata

logger = logging.getLogger(__name__)

SIG_K1_PREFIX = "SIG_K1_"

_REQUIRED_LENGTH = 65
# compressed public key, i.e. 27 + 4
_RF_BASE = 31
_CANONICAL_SCALAR_SIZE = 32

# each retry has about 1/2 probability of success
MAX_CANONICAL_RETRIES = 1_000
_RETRY_WARNING_INTERVAL = 10


@dataclass(frozen=True)
class K1Sig:
    # 1 byte
    rf: int
    dsa_sig: dsa.Sig
    check_validity: InitVar[bool] = True

    def __post_init__(self, check_validity: bool) -> None:
        if check_validity:
            self.assert_valid()

    def assert_valid(self) -> None:
        if not 27 <= self.rf <= 34:
            raise EOSK1ValueError(f"invalid recovery flag: {self.rf}")
        self.dsa_sig.assert_valid()
        if self.dsa_sig.ec != secp256k1:
            raise EOSK1ValueError(f"invalid curve: {self.dsa_sig.ec.name}")
        key_id = self.dsa_sig.key_id
        if key_id is not None and key_id != self.key_id:
            err_msg = f"recovery flag / key_id mismatch: {self.rf}, {key_id}"
            raise EOSK1ValueError(err_msg)

    @property
    def key_id(self) -> int:
        # first two bits in rf are reserved for key_id
        return (self.rf - 27) & 0b11

    @property
    def compressed(self) -> bool:
        # third bit in rf is reserved for the 'compressed' boolean
        return self.rf > 30

    def serialize(self, check_validity: bool = True) -> bytes:
        if check_validity:
            self.assert_valid()

        # [1-byte recovery flag][32-bytes r][32-bytes s]
        n_size = self.dsa_sig.ec.n_size
        return b"".join(
            [
                self.rf.to_bytes(1, byteorder="big", signed=False),
                self.dsa_sig.r.to_bytes(n_size, byteorder="big", signed=False),
                self.dsa_sig.s.to_bytes(n_size, byteorder="big", signed=False),
            ]
        )

    def b58encode(self, check_validity: bool = True) -> str:
        """Return the signature as SIG_K1_ string.

        First off, the signature is serialized in the
        [1-byte rf][32-bytes r][32-bytes s] compact format,
        then it is base58-encoded with the K1 RIPEMD160 checksum.
        """

        data_binary = self.serialize(check_validity)
        return SIG_K1_PREFIX + b58encode_ripemd160(data_binary, K1_SUFFIX)

    def __str__(self) -> str:
        return self.b58encode()

    @classmethod
    def parse(
        cls: Type["K1Sig"], data: BinaryData, check_validity: bool = True
    ) -> "K1Sig":

        stream = bytesio_from_binarydata(data)
        sig_bin = stream.read(_REQUIRED_LENGTH)
        if not sig_bin:
            raise InvalidEncodingError("empty signature")
        if check_validity and len(sig_bin) != _REQUIRED_LENGTH:
            err_msg = f"invalid decoded length: {len(sig_bin)}"
            err_msg += f" instead of {_REQUIRED_LENGTH}"
            raise InvalidEncodingError(err_msg)

        rf = sig_bin[0]
        ec = secp256k1
        n_size = ec.n_size
        r = int.from_bytes(sig_bin[1 : 1 + n_size], "big", signed=False)
        s = int.from_bytes(sig_bin[1 + n_size : 1 + 2 * n_size], "big", signed=False)
        key_id = (rf - 27) & 0b11
        dsa_sig = dsa.Sig(r, s, key_id, ec, check_validity=False)
        return cls(rf, dsa_sig, check_validity)

    @classmethod
    def b58decode(
        cls: Type["K1Sig"], data: String, check_validity: bool = True
    ) -> "K1Sig":
        "Return the signature from its SIG_K1_ string."

        if isinstance(data, bytes):
            data = data.decode("ascii")
        data = data.strip()
        if not data.startswith(SIG_K1_PREFIX):
            raise InvalidEncodingError(f"missing {SIG_K1_PREFIX} prefix: {data}")

        data_decoded = b58decode_ripemd160(
            data[len(SIG_K1_PREFIX) :], K1_SUFFIX, _REQUIRED_LENGTH
        )
        return cls.parse(data_decoded, check_validity)


def is_canonical(sig: dsa.Sig) -> bool:
    "Return True if r and s are both 32 bytes DER integers."
    return (
        der_scalar_size(sig.r) == _CANONICAL_SCALAR_SIZE
        and der_scalar_size(sig.s) == _CANONICAL_SCALAR_SIZE
    )


def _hash_msg(msg: String) -> bytes:
    if isinstance(msg, str):
        msg = msg.encode()
    return sha256(msg)


def _canonical_sign_(msg_hash: bytes, q: int, ec: Curve, retry: int) -> K1Sig:
    dsa_sig = dsa.sign_(msg_hash, q, ec=ec, retry=retry)
    if not is_canonical(dsa_sig):
        err_msg = "not a canonical signature: "
        err_msg += f"{der_scalar_size(dsa_sig.r)} bytes r, "
        err_msg += f"{der_scalar_size(dsa_sig.s)} bytes s"
        raise NonCanonicalLengthError(err_msg)
    # dsa_sig.key_id is set by dsa.sign_
    return K1Sig(_RF_BASE + dsa_sig.key_id, dsa_sig)  # type: ignore


def sign_(
    msg_hash: Octets,
    prv_key: PrvKey,
    ec: Curve = secp256k1,
    max_retries: int = MAX_CANONICAL_RETRIES,
) -> K1Sig:
    """Return the canonical K1 signature of a 32 bytes message hash.

    The RFC6979 nonce generation is perturbed with an increasing
    retry counter until a canonical signature is found.
    """

    msg_hash = bytes_from_octets(msg_hash, 32)
    q = int_from_prv_key(prv_key, ec)

    for retry in range(max_retries):
        if retry and retry % _RETRY_WARNING_INTERVAL == 0:
            logger.warning("no canonical signature after %d retries", retry)
        try:
            return _canonical_sign_(msg_hash, q, ec, retry)
        except NonCanonicalLengthError as e:
            logger.debug("retry %d: %s", retry, e)

    err_msg = f"no canonical signature in {max_retries} retries"
    raise IterationBudgetExceededError(err_msg)


def sign(
    msg: String,
    prv_key: PrvKey,
    ec: Curve = secp256k1,
    max_retries: int = MAX_CANONICAL_RETRIES,
) -> K1Sig:
    """Return the canonical K1 signature of the SHA256 of the message.

    Text string messages are utf-8 encoded.
    """

    return sign_(_hash_msg(msg), prv_key, ec, max_retries)


def _to_k1_sig(sig: Union[K1Sig, String]) -> K1Sig:
    if isinstance(sig, K1Sig):
        sig.assert_valid()
        return sig
    if isinstance(sig, str) or sig[: len(SIG_K1_PREFIX)] == SIG_K1_PREFIX.encode():
        return K1Sig.b58decode(sig)
    return K1Sig.parse(sig)


def recover_pub_key_(msg_hash: Octets, sig: Union[K1Sig, String]) -> CurvePoint:
    "Return the public key recovered from the signature of the message hash."

    sig = _to_k1_sig(sig)
    return dsa.recover_pub_key_(sig.key_id, msg_hash, sig.dsa_sig)


def recover_pub_key(msg: String, sig: Union[K1Sig, String]) -> CurvePoint:
    "Return the public key recovered from the signature of the message."
    return recover_pub_key_(_hash_msg(msg), sig)


def assert_as_valid_(
    msg_hash: Octets, key: Key, sig: Union[K1Sig, String], lower_s: bool = True
) -> None:
    # Private function for test/dev purposes
    # It raises Errors, while verify should always return True or False

    sig = _to_k1_sig(sig)
    Q = dsa.recover_pub_key_(sig.key_id, msg_hash, sig.dsa_sig)
    if Q != point_from_key(key, sig.dsa_sig.ec):
        raise EOSK1RuntimeError("signature verification failed: key mismatch")
    dsa.assert_as_valid_(msg_hash, Q, sig.dsa_sig, lower_s)


def assert_as_valid(
    msg: String, key: Key, sig: Union[K1Sig, String], lower_s: bool = True
) -> None:
    # Private function for test/dev purposes
    # It raises Errors, while verify should always return True or False
    assert_as_valid_(_hash_msg(msg), key, sig, lower_s)


def verify_(
    msg_hash: Octets, key: Key, sig: Union[K1Sig, String], lower_s: bool = True
) -> bool:
    "Verify the K1 signature of the message hash for the given key."

    # all kind of Exceptions are catched because
    # verify must always return a bool
    try:
        assert_as_valid_(msg_hash, key, sig, lower_s)
    except Exception:  # pylint: disable=broad-except
        return False

    return True


def verify(
    msg: String, key: Key, sig: Union[K1Sig, String], lower_s: bool = True
) -> bool:
    "Verify the K1 signature of the message for the given key."
    return verify_(_hash_msg(msg), key, sig, lower_s)
