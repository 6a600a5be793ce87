#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Elliptic curve points in projective coordinates and their group law.

A point (X, Y, Z) represents the affine point (X/Z, Y/Z):
projective coordinates avoid the expensive modular inversion
at every group operation, leaving a single inversion
for the final conversion to affine coordinates.

The infinity point INF has Z = 0 and Y ≠ 0;
Z = 0 and Y = 0 is not a point at all.

The same affine point has (p-1) projective representations:
never compare (X, Y, Z) tuples, use point equality.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Optional, Tuple

from eosk1.ecc.number_theory import mod_inv
from eosk1.exceptions import EOSK1TypeError, EOSK1ValueError
from eosk1.utils import hex_string

if TYPE_CHECKING:
    from eosk1.ecc.curve import Curve

# guards the write of the memoized Z inverse
_Z_INV_LOCK = threading.Lock()


class CurvePoint:
    """Point of an elliptic curve over Fp, in projective coordinates.

    Points are immutable: every group operation returns a new point.
    The compressed flag is only a serialization preference.
    """

    def __init__(
        self, ec: Curve, X: int, Y: int, Z: int = 1, compressed: bool = True
    ) -> None:
        if Z == 0 and Y == 0:
            raise EOSK1ValueError("ill-formed point: Y = Z = 0")
        self.ec = ec
        self.X = X
        self.Y = Y
        self.Z = Z
        self.compressed = compressed
        self._z_inv: Optional[int] = None

    @classmethod
    def from_affine(
        cls, ec: Curve, x: int, y: int, compressed: bool = True
    ) -> CurvePoint:
        return cls(ec, x, y, 1, compressed)

    @property
    def is_infinity(self) -> bool:
        return self.Z == 0 and self.Y != 0

    @property
    def z_inv(self) -> int:
        "Return the inverse of Z (mod p), computed on first access."

        z_inv = self._z_inv
        if z_inv is None:
            # pure function of Z and p: concurrent recomputation agrees
            z_inv = mod_inv(self.Z, self.ec.p)
            with _Z_INV_LOCK:
                self._z_inv = z_inv
        return z_inv

    @property
    def x(self) -> int:
        "Affine x-coordinate."
        if self.is_infinity:
            raise EOSK1ValueError("INF has no x-coordinate")
        return self.X * self.z_inv % self.ec.p

    @property
    def y(self) -> int:
        "Affine y-coordinate."
        if self.is_infinity:
            raise EOSK1ValueError("INF has no y-coordinate")
        return self.Y * self.z_inv % self.ec.p

    def affine(self) -> Tuple[int, int]:
        return self.x, self.y

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if not isinstance(other, CurvePoint):
            return NotImplemented
        if self.ec is not other.ec and self.ec != other.ec:
            return False
        if self.is_infinity or other.is_infinity:
            return self.is_infinity and other.is_infinity

        p = self.ec.p
        if (other.Y * self.Z - self.Y * other.Z) % p:
            return False
        return (other.X * self.Z - self.X * other.Z) % p == 0

    def __hash__(self) -> int:
        if self.is_infinity:
            return hash((self.ec.p, None))
        return hash((self.ec.p, self.x, self.y))

    def __str__(self) -> str:
        if self.is_infinity:
            return "INF"
        return f"({hex_string(self.x)}, {hex_string(self.y)})"

    def __repr__(self) -> str:
        if self.is_infinity:
            return "CurvePoint(INF)"
        return f"CurvePoint('{hex_string(self.x)}', '{hex_string(self.y)}')"

    def negate(self) -> CurvePoint:
        "Return the opposite point."
        if self.is_infinity:
            return self
        p = self.ec.p
        return CurvePoint(self.ec, self.X, (p - self.Y) % p, self.Z, self.compressed)

    def __neg__(self) -> CurvePoint:
        return self.negate()

    def add(self, other: CurvePoint) -> CurvePoint:
        """Return the sum of two points.

        The input points are assumed to be on the same curve.
        """

        if self.is_infinity:
            return other
        if other.is_infinity:
            return self

        p = self.ec.p
        x1, y1, z1 = self.X, self.Y, self.Z
        x2, y2, z2 = other.X, other.Y, other.Z

        # python % returns the non-negative residue
        u = (y2 * z1 - y1 * z2) % p
        v = (x2 * z1 - x1 * z2) % p

        if v == 0:  # same affine x
            if u == 0:
                return self.double()
            # opposite points
            return self.ec.infinity()

        v2 = v * v
        v3 = v2 * v
        x1v2 = x1 * v2
        zu2 = u * u * z1

        x3 = (((zu2 - 2 * x1v2) * z2 - v3) * v) % p
        y3 = ((3 * x1v2 * u - y1 * v3 - zu2 * u) * z2 + u * v3) % p
        z3 = (v3 * z1 * z2) % p
        return CurvePoint(self.ec, x3, y3, z3, self.compressed)

    def __add__(self, other: CurvePoint) -> CurvePoint:
        if not isinstance(other, CurvePoint):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: CurvePoint) -> CurvePoint:
        if not isinstance(other, CurvePoint):
            return NotImplemented
        return self.add(other.negate())

    def double(self) -> CurvePoint:
        """Return the double of the point.

        Points of order two (y = 0) double to INF.
        """

        if self.is_infinity:
            return self
        if self.Y == 0:
            return self.ec.infinity()

        p = self.ec.p
        x1, y1, z1 = self.X, self.Y, self.Z

        y1z1 = (y1 * z1) % p
        y1sqz1 = (y1z1 * y1) % p

        w = 3 * x1 * x1
        if self.ec.a:
            w += self.ec.a * z1 * z1
        w %= p

        x3 = (2 * (w * w - 8 * x1 * y1sqz1) * y1z1) % p
        y3 = (4 * (3 * w * x1 - 2 * y1sqz1) * y1sqz1 - w * w * w) % p
        z3 = (8 * y1z1 * y1z1 * y1z1) % p
        return CurvePoint(self.ec, x3, y3, z3, self.compressed)

    def mult(self, k: int) -> CurvePoint:
        """Scalar multiplication k*P.

        This implementation uses a signed-digit 'double & add',
        'left-to-right' scan of h = 3k:
        where the bits of h and k differ, P or -P is added
        (the difference h - k = 2k is the non-adjacent form of 2k),
        where they agree only the doubling is performed.

        The k coefficient is not reduced mod n: this allows n*P
        to be computed for point validation.
        It is not constant-time.
        """

        if not isinstance(k, int):
            raise EOSK1TypeError(f"not an integer scalar: {k!r}")
        if k < 0:
            raise EOSK1ValueError(f"negative scalar: {hex(k)}")

        if self.is_infinity:
            return self
        if k == 0:
            return self.ec.infinity()

        h = 3 * k
        neg = self.negate()
        R = self
        # the most significant bit of h is accounted for by R = P,
        # bit 0 of h and k always agree (3k and k have the same parity)
        for i in range(h.bit_length() - 2, 0, -1):
            h_bit = (h >> i) & 1
            k_bit = (k >> i) & 1
            R = R.double()
            if h_bit != k_bit:
                R = R.add(self if h_bit else neg)

        return R

    def __mul__(self, k: int) -> CurvePoint:
        if not isinstance(k, int):
            return NotImplemented
        return self.mult(k)

    __rmul__ = __mul__

    def double_mult(self, j: int, X: CurvePoint, k: int) -> CurvePoint:
        """Double scalar multiplication j*P + k*X.

        This implementation uses the Shamir-Strauss algorithm,
        'left-to-right' binary decomposition of the j and k coefficients:
        a single 'double & add' loop for the parallel calculation
        of j*P and k*X, using a single 'doubling' for both.

        The Shamir trick adds the precomputation of P+X,
        which is to be added in the loop when the binary digits
        of j and k are both equal to 1.
        """

        if j < 0:
            raise EOSK1ValueError(f"negative first coefficient: {hex(j)}")
        if k < 0:
            raise EOSK1ValueError(f"negative second coefficient: {hex(k)}")

        # at each step one of the following points will be added
        both = self.add(X)
        T = [None, self, X, both]

        R = self.ec.infinity()
        for i in range(max(j.bit_length(), k.bit_length()) - 1, -1, -1):
            R = R.double()
            digit = ((j >> i) & 1) + 2 * ((k >> i) & 1)
            if digit:
                R = R.add(T[digit])  # type: ignore
        return R
