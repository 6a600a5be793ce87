#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Elliptic curve classes and standard curves.

Curve parameters are loaded from the json data files,
with all values as hex-strings:
the secp256k1 parameters are from SEC 2 v.2

http://www.secg.org/sec2-v2.pdf
"""

import json
from math import ceil, sqrt
from os import path
from typing import Dict, Optional, Sequence

from eosk1.alias import Integer
from eosk1.ecc.number_theory import mod_sqrt
from eosk1.ecc.point import CurvePoint
from eosk1.exceptions import EOSK1TypeError, EOSK1ValueError
from eosk1.utils import HEX_THRESHOLD, hex_string, int_from_integer, int_repr


class CurveGroup:
    """Finite group of the points of an elliptic curve over Fp.

    The elliptic curve is the set of points (x, y)
    that are solutions to a Weierstrass equation y^2 = x^3 + a*x + b,
    with x, y, a, and b in Fp (p being a prime),
    together with a point at infinity INF.
    The constants a, b must satisfy the relationship
    4 a^3 + 27 b^2 ≠ 0.

    The group is defined by the point addition group law.
    """

    def __init__(self, p: Integer, a: Integer, b: Integer) -> None:
        # Parameters are checked according to SEC 1 v.2 3.1.1.2.1

        p = int_from_integer(p)
        a = int_from_integer(a)
        b = int_from_integer(b)

        # 1) check that p is a prime
        # Fermat test will do as _probabilistic_ primality test...
        if p < 2 or p % 2 == 0 or pow(2, p - 1, p) != 1:
            raise EOSK1ValueError(f"p is not prime: {int_repr(p)}")

        self.p = p
        # byte-length
        self.p_size = ceil(p.bit_length() / 8)
        # square roots are a single exponentiation if true
        self.p_is_3_mod_4 = p % 4 == 3

        # 2. check that a and b are integers in the interval [0, p−1]
        if not 0 <= a < p:
            raise EOSK1ValueError(f"invalid a: {int_repr(a)}")
        if not 0 <= b < p:
            raise EOSK1ValueError(f"invalid b: {int_repr(b)}")

        # 3. Check that 4*a^3 + 27*b^2 ≠ 0 (mod p)
        d = 4 * a * a * a + 27 * b * b
        if d % p == 0:
            raise EOSK1ValueError("zero discriminant")
        self._a = a
        self._b = b

    @property
    def a(self) -> int:
        return self._a

    @property
    def b(self) -> int:
        return self._b

    def infinity(self) -> CurvePoint:
        "Return the infinity point, i.e. the group identity."
        return CurvePoint(self, 0, 1, 0)

    @staticmethod
    def is_infinity(Q: CurvePoint) -> bool:
        return Q.Z == 0 and Q.Y != 0

    def _y2(self, x: int) -> int:
        # skipping a crucial check here:
        # if sqrt(y*y) does not exist, then x is not valid.
        # This is a good reason to keep this method private
        return ((x * x + self._a) * x + self._b) % self.p

    def y(self, x: int) -> int:
        "Return one of the two y-coordinates associated to x."

        if not 0 <= x < self.p:
            raise EOSK1ValueError(f"x-coordinate not in 0..p-1: {int_repr(x)}")
        y2 = self._y2(x)
        try:
            return mod_sqrt(y2, self.p)
        except EOSK1ValueError as e:
            err_msg = f"invalid x-coordinate: {int_repr(x)}"
            raise EOSK1ValueError(err_msg) from e

    def y_even(self, x: int) -> int:
        "Return the even y-coordinate associated to x."
        root = self.y(x)
        return self.p - root if root & 1 else root

    def point_from_x(self, is_odd: int, x: int) -> CurvePoint:
        """Return the point with x-coordinate x and the required y parity.

        The square root is computed as (x^3 + a*x + b)^((p+1)/4) (mod p)
        if p = 3 (mod 4), with the Tonelli-Shanks algorithm otherwise;
        the opposite root is selected if its parity differs from is_odd.
        """

        if is_odd not in (0, 1):
            raise EOSK1ValueError(f"invalid parity: {is_odd}")
        root = self.y(x)
        # switch even/odd root as needed (XORing the conditions)
        y = root if root & 1 == is_odd else self.p - root
        return CurvePoint(self, x, y % self.p)

    def is_on_curve(self, Q: CurvePoint) -> bool:
        "Return True if the point is on the curve."

        if not isinstance(Q, CurvePoint):
            raise EOSK1TypeError(f"not a point: {Q!r}")
        if Q.ec != self:
            return False
        if Q.is_infinity:
            return True
        x, y = Q.affine()
        return self._y2(x) == y * y % self.p

    def require_on_curve(self, Q: CurvePoint) -> None:
        "Require the input curve point to be on the curve."
        if not self.is_on_curve(Q):
            raise EOSK1ValueError("point not on curve")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CurveGroup):
            return NotImplemented
        return (self.p, self._a, self._b) == (other.p, other._a, other._b)

    def __hash__(self) -> int:
        return hash((self.p, self._a, self._b))

    def __str__(self) -> str:
        result = "Curve"
        if self.p > HEX_THRESHOLD:
            result += f"\n p   = {hex_string(self.p)}"
        else:
            result += f"\n p   = {self.p}"

        if self._a > HEX_THRESHOLD or self._b > HEX_THRESHOLD:
            result += f"\n a   = {hex_string(self._a)}"
            result += f"\n b   = {hex_string(self._b)}"
        else:
            result += f"\n a   = {self._a}"
            result += f"\n b   = {self._b}"

        return result

    def __repr__(self) -> str:
        result = f"Curve({int_repr(self.p)}"
        if self._a > HEX_THRESHOLD or self._b > HEX_THRESHOLD:
            result += f", '{hex_string(self._a)}', '{hex_string(self._b)}'"
        else:
            result += f", {self._a}, {self._b}"
        result += ")"
        return result


class Curve(CurveGroup):
    "Prime order subgroup of the points of an elliptic curve over Fp."

    def __init__(
        self,
        p: Integer,
        a: Integer,
        b: Integer,
        G: Sequence[Integer],
        n: Integer,
        h: int,
        weakness_check: bool = True,
        name: Optional[str] = None,
    ) -> None:

        super().__init__(p, a, b)

        # 2. check that xG and yG are integers in the interval [0, p−1]
        # 4. Check that yG^2 = xG^3 + a*xG + b (mod p)
        if len(G) != 2:
            raise EOSK1ValueError("generator must a be a sequence[int, int]")
        self.G = (int_from_integer(G[0]), int_from_integer(G[1]))
        if not all(0 <= c < self.p for c in self.G):
            raise EOSK1ValueError("generator coordinate not in 0..p-1")
        if self._y2(self.G[0]) != self.G[1] * self.G[1] % self.p:
            raise EOSK1ValueError("generator is not on the curve")

        n = int_from_integer(n)

        # Security level is expressed in bits, where n-bit security
        # means that the attacker would have to perform 2^n operations
        # to break it. Security bits are half the key size for asymmetric
        # elliptic curve cryptography, i.e. half of the number of bits
        # required to express the group order n or, holding Hasse theorem,
        # to express the field prime p
        self.n = n
        self.nlen = n.bit_length()
        self.n_size = (self.nlen + 7) // 8

        # 5. Check that n is prime.
        if n < 2 or n % 2 == 0 or pow(2, n - 1, n) != 1:
            raise EOSK1ValueError(f"n is not prime: {int_repr(n)}")
        delta = int(2 * sqrt(self.p))
        # also check n with Hasse Theorem
        if h < 2 and not self.p + 1 - delta <= n <= self.p + 1 + delta:
            raise EOSK1ValueError(f"n not in p+1-delta..p+1+delta: {int_repr(n)}")

        # 7. Check that G ≠ INF, nG = INF
        if not self.generator().mult(n).is_infinity:
            raise EOSK1ValueError(f"n is not the group order: {int_repr(n)}")

        # 6. Check cofactor
        exp_h = int(1 / n + delta / n + self.p / n)
        if h != exp_h:
            raise EOSK1ValueError(f"invalid h: {h}, expected {exp_h}")
        self.h = h

        # 8. Check that n ≠ p
        if n == self.p:
            raise EOSK1ValueError(f"n=p weak curve: {hex_string(n)}")

        if weakness_check:
            # 8. Check that p^i % n ≠ 1 for all 1≤i<100
            for i in range(1, 100):
                if pow(self.p, i, n) == 1:
                    raise UserWarning("weak curve")

        self.name = name

    def generator(self) -> CurvePoint:
        "Return a fresh copy of the generator point."
        return CurvePoint(self, self.G[0], self.G[1], 1)

    def validate(self, Q: CurvePoint) -> None:
        """Require Q to be a point of the prime order subgroup.

        This requires a full scalar multiplication (n*Q == INF):
        it is meant for tests and auditing, not for routine use.
        """

        self.require_on_curve(Q)
        if not Q.mult(self.n).is_infinity:
            raise EOSK1ValueError("point not in the prime order subgroup")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Curve):
            return NotImplemented
        if not super().__eq__(other):
            return False
        return (self.G, self.n, self.h) == (other.G, other.n, other.h)

    def __hash__(self) -> int:
        return hash((self.p, self._a, self._b, self.G, self.n, self.h))

    def __str__(self) -> str:
        result = super().__str__()
        if self.p > HEX_THRESHOLD:
            result += f"\n x_G = {hex_string(self.G[0])}"
            result += f"\n y_G = {hex_string(self.G[1])}"
        else:
            result += f"\n x_G = {self.G[0]}"
            result += f"\n y_G = {self.G[1]}"
        if self.n > HEX_THRESHOLD:
            result += f"\n n   = {hex_string(self.n)}"
        else:
            result += f"\n n   = {self.n}"
        result += f"\n h   = {self.h}"
        return result

    def __repr__(self) -> str:
        result = super().__repr__()[:-1]
        if self.p > HEX_THRESHOLD:
            result += f", ('{hex_string(self.G[0])}', '{hex_string(self.G[1])}')"
        else:
            result += f", ({self.G[0]}, {self.G[1]})"
        result += f", {int_repr(self.n)}"
        result += f", {self.h}"
        result += ")"
        return result


_DATA_DIR = path.join(path.dirname(__file__), "_data")


def _load_curves(filename: str) -> Dict[str, Curve]:
    with open(path.join(_DATA_DIR, filename), "r", encoding="ascii") as file_:
        curve_params = json.load(file_)
    return {
        ec_name: Curve(*params, name=ec_name)
        for ec_name, params in curve_params.items()
    }


CURVES = _load_curves("curves.json")

secp256k1 = CURVES["secp256k1"]
