#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Modular arithmetic functions.

Arbitrary precision arithmetic is provided by the native python int:
three-argument pow() is used for modular exponentiation
and pow(a, -1, m) for the modular inverse.

The Tonelli-Shanks implementation is originally from
https://codereview.stackexchange.com/questions/43210/tonelli-shanks-algorithm-implementation-of-prime-modular-square-root/43267
"""

from eosk1.exceptions import EOSK1ValueError, NonInvertibleError
from eosk1.utils import int_repr


def mod_inv(a: int, m: int) -> int:
    """Return the inverse of a (mod m). m does not have to be a prime.

    An error is raised if a and m are not coprime,
    i.e. a result is never silently returned for a non-invertible a.
    """

    a %= m
    try:
        return pow(a, -1, m)
    except ValueError as e:
        err_msg = f"no inverse for {int_repr(a)} mod {int_repr(m)}"
        raise NonInvertibleError(err_msg) from e


def legendre_symbol(a: int, p: int) -> int:
    """Compute the Legendre symbol a|p using Euler's criterion.

    p is a prime, a is relatively prime to p (if p divides a,
    then a|p = 0).
    It returns 1 if a has a square root modulo p, -1 otherwise.
    """

    ls = pow(a, p >> 1, p)
    return -1 if ls == p - 1 else ls


def mod_sqrt(a: int, p: int) -> int:
    """Return a quadratic residue (mod p) of a; p must be a prime.

    Solve the equation:
        x^2 = a mod p

    and return x. Note that p - x is also a root.

    For p = 3 mod 4 (e.g. secp256k1) the root candidate is
    a^((p+1)/4) mod p; if no simple solution is available for p,
    then the Tonelli-Shanks algorithm is used.
    """

    a %= p

    if p % 4 == 3:
        r = pow(a, (p + 1) >> 2, p)
    elif p % 8 == 5:
        r = pow(a, (p + 3) >> 3, p)
        if r * r % p != a:
            # the other root candidate
            r = r * pow(2, p >> 2, p) % p
    else:
        return tonelli(a, p)

    if r * r % p != a:
        raise EOSK1ValueError(f"no root for {int_repr(a)} mod {int_repr(p)}")
    return r


def tonelli(a: int, p: int) -> int:
    """Return a quadratic residue (mod p) of a; p must be a prime.

    The Tonelli-Shanks algorithm is used.
    """

    a %= p
    if a == 0 or p == 2:
        return a

    if legendre_symbol(a, p) != 1:
        raise EOSK1ValueError(f"no root for {int_repr(a)} mod {int_repr(p)}")

    # Factor p-1 on the form q * 2^s (with q odd)
    q, s = p - 1, 0
    while q & 1 == 0:
        s += 1
        q >>= 1
    if s == 1:
        return pow(a, (p + 1) // 4, p)

    # Select a z which is a quadratic non residue modulo p
    z = 1
    while legendre_symbol(z, p) != -1:
        z += 1
    c = pow(z, q, p)
    r = pow(a, (q + 1) // 2, p)
    t = pow(a, q, p)
    while t != 1:
        # Find the lowest i such that t^(2^i) = 1
        t2i = t
        for i in range(1, s):
            t2i = t2i * t2i % p
            if t2i == 1:
                b = pow(c, 1 << (s - i - 1), p)
                r = (r * b) % p
                c = (b * b) % p
                t = (t * c) % p
                s = i
                break

    return r
