#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Deterministic generation of the ephemeral key following RFC6979.

https://tools.ietf.org/html/rfc6979

ECDSA needs to produce, for each signature generation,
a fresh random value (ephemeral key, hereafter designated as nonce).
For effective security, nonce must be chosen randomly and uniformly
from a set of modular integers, using a cryptographically secure
process. Even slight biases in that process may be turned into
attacks on the signature scheme.
Moreover, reusing the same ephemeral key for a different message
signed with the same private key reveal the private key!

RFC6979 turns ECDSA into a deterministic scheme by using a
deterministic process for generating the nonce.

EOS wallets add a retry counter to the process:
when a signature has to be discarded (e.g. because it is not canonical)
the message hash is perturbed as hf(msg_hash || 0x00 * retry),
so that a different nonce sequence is generated.
With retry = 0 the nonce is the plain RFC6979 one.
"""

import hashlib
import hmac
import logging
from typing import Callable, Iterator, Optional

from eosk1.alias import HashF, Octets
from eosk1.ecc.curve import Curve, secp256k1
from eosk1.exceptions import EOSK1ValueError, IterationBudgetExceededError
from eosk1.hashes import reduce_to_hlen
from eosk1.keys import PrvKey, int_from_prv_key
from eosk1.utils import bytes_from_octets, int_from_bits

logger = logging.getLogger(__name__)

# more than enough: each candidate is rejected with negligible probability
MAX_NONCE_ITERATIONS = 1_000


def challenge_(
    msg_hash: Octets, ec: Curve = secp256k1, hf: HashF = hashlib.sha256
) -> int:
    # the message msg_hash: a hf_len array
    hf_len = hf().digest_size
    msg_hash = bytes_from_octets(msg_hash, hf_len)

    # leftmost ec.nlen bits %= ec.n
    return int_from_bits(msg_hash, ec.nlen) % ec.n


def rfc6979_candidates_(
    msg_hash: Octets,
    q: int,
    ec: Curve = secp256k1,
    hf: HashF = hashlib.sha256,
    retry: int = 0,
) -> Iterator[int]:
    """Yield the RFC6979 candidate nonces, in order.

    Every candidate is yielded, including those not in 1..n-1:
    range check is left to the caller.
    The generator is unbounded: it is up to the caller
    to stop consuming candidates.

    see https://tools.ietf.org/html/rfc6979 section 3.2
    """

    hf_len = hf().digest_size
    msg_hash = bytes_from_octets(msg_hash, hf_len)
    if retry < 0:
        raise EOSK1ValueError(f"negative retry counter: {retry}")
    if retry:
        msg_hash = hf(msg_hash + b"\x00" * retry).digest()

    # convert the private key q to an octet sequence of size n_size
    q_bytes = q.to_bytes(ec.n_size, byteorder="big", signed=False)
    bprvbm = q_bytes + msg_hash

    v = b"\x01" * hf_len  # 3.2.b
    k = b"\x00" * hf_len  # 3.2.c

    k = hmac.new(k, v + b"\x00" + bprvbm, hf).digest()  # 3.2.d
    v = hmac.new(k, v, hf).digest()  # 3.2.e
    k = hmac.new(k, v + b"\x01" + bprvbm, hf).digest()  # 3.2.f
    v = hmac.new(k, v, hf).digest()  # 3.2.g

    while True:  # 3.2.h
        t = b""  # 3.2.h.1
        while len(t) < ec.n_size:  # 3.2.h.2
            v = hmac.new(k, v, hf).digest()
            t += v
        yield int_from_bits(t, ec.nlen)  # 3.2.h.3
        k = hmac.new(k, v + b"\x00", hf).digest()
        v = hmac.new(k, v, hf).digest()


def rfc6979_nonce_(
    msg_hash: Octets,
    prv_key: PrvKey,
    ec: Curve = secp256k1,
    hf: HashF = hashlib.sha256,
    check: Optional[Callable[[int], bool]] = None,
    retry: int = 0,
    max_iterations: int = MAX_NONCE_ITERATIONS,
) -> int:
    """Return an RFC6979 deterministic ephemeral key (nonce).

    The first in-range candidate accepted by check is returned;
    if check is None the first in-range candidate is returned.
    Every candidate, in range or not, counts against max_iterations.

    see https://tools.ietf.org/html/rfc6979 section 3.2
    """

    q = int_from_prv_key(prv_key, ec)
    candidates = rfc6979_candidates_(msg_hash, q, ec, hf, retry)
    for _, nonce in zip(range(max_iterations), candidates):
        # In general, taking a uniformly random integer (like those
        # obtained from a hash function in the random oracle model)
        # modulo the curve order n would produce a biased result:
        # out of range candidates are discarded instead
        if not 0 < nonce < ec.n:
            logger.debug("out of range nonce candidate discarded")
        elif check is None or check(nonce):
            return nonce
        else:
            logger.debug("nonce candidate rejected")

    err_msg = f"no acceptable nonce in {max_iterations} iterations"
    raise IterationBudgetExceededError(err_msg)


def rfc6979_nonce(
    msg: Octets,
    prv_key: PrvKey,
    ec: Curve = secp256k1,
    hf: HashF = hashlib.sha256,
    retry: int = 0,
) -> int:
    """Return an RFC6979 deterministic ephemeral key (nonce).

    see https://tools.ietf.org/html/rfc6979 section 3.2
    """

    msg_hash = reduce_to_hlen(msg, hf)
    return rfc6979_nonce_(msg_hash, prv_key, ec, hf, retry=retry)
