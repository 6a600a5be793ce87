#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `eosk1.ecc.curve` module."

from typing import Dict

import pytest

from eosk1.ecc.curve import CURVES, Curve, CurveGroup, secp256k1
from eosk1.ecc.point import CurvePoint
from eosk1.exceptions import EOSK1TypeError, EOSK1ValueError

# test curves: very low cardinality
low_card_curves: Dict[str, Curve] = {}
# 13 % 4 = 1; 13 % 8 = 5
low_card_curves["ec13_11"] = Curve(13, 7, 6, (1, 1), 11, 1, False)
low_card_curves["ec13_19"] = Curve(13, 0, 2, (1, 9), 19, 1, False)
# 17 % 4 = 1; 17 % 8 = 1
low_card_curves["ec17_13"] = Curve(17, 6, 8, (0, 12), 13, 2, False)
low_card_curves["ec17_23"] = Curve(17, 3, 5, (1, 14), 23, 1, False)
# 19 % 4 = 3; 19 % 8 = 3
low_card_curves["ec19_13"] = Curve(19, 0, 2, (4, 16), 13, 2, False)
low_card_curves["ec19_23"] = Curve(19, 2, 9, (0, 16), 23, 1, False)
# 23 % 4 = 3; 23 % 8 = 7
low_card_curves["ec23_19"] = Curve(23, 9, 7, (5, 4), 19, 1, False)
low_card_curves["ec23_31"] = Curve(23, 5, 1, (0, 1), 31, 1, False)

all_curves: Dict[str, Curve] = {}
all_curves.update(low_card_curves)
all_curves.update(CURVES)

ec13_11 = low_card_curves["ec13_11"]


def test_exceptions() -> None:

    # good curve
    Curve(13, 0, 2, (1, 9), 19, 1, False)

    with pytest.raises(EOSK1ValueError, match="p is not prime: "):
        Curve(15, 0, 2, (1, 9), 19, 1, False)

    with pytest.raises(EOSK1ValueError, match="invalid a: "):
        Curve(13, -1, 2, (1, 9), 19, 1, False)

    with pytest.raises(EOSK1ValueError, match="invalid a: "):
        Curve(13, 13, 2, (1, 9), 19, 1, False)

    with pytest.raises(EOSK1ValueError, match="invalid b: "):
        Curve(13, 0, -2, (1, 9), 19, 1, False)

    with pytest.raises(EOSK1ValueError, match="invalid b: "):
        Curve(13, 0, 13, (1, 9), 19, 1, False)

    with pytest.raises(EOSK1ValueError, match="zero discriminant"):
        Curve(11, 7, 7, (1, 9), 19, 1, False)

    err_msg = "generator must a be a sequence\\[int, int\\]"
    with pytest.raises(EOSK1ValueError, match=err_msg):
        Curve(13, 0, 2, (1, 9, 1), 19, 1, False)  # type: ignore

    with pytest.raises(EOSK1ValueError, match="generator coordinate not in 0..p-1"):
        Curve(13, 0, 2, (-1, 9), 19, 1, False)

    with pytest.raises(EOSK1ValueError, match="generator is not on the curve"):
        Curve(13, 0, 2, (2, 9), 19, 1, False)

    with pytest.raises(EOSK1ValueError, match="n is not prime: "):
        Curve(13, 0, 2, (1, 9), 20, 1, False)

    with pytest.raises(EOSK1ValueError, match="n not in p\\+1-delta..p\\+1\\+delta: "):
        Curve(13, 0, 2, (1, 9), 71, 1, False)

    with pytest.raises(EOSK1ValueError, match="n is not the group order: "):
        Curve(13, 0, 2, (1, 9), 17, 1, False)

    with pytest.raises(EOSK1ValueError, match="invalid h: "):
        Curve(13, 0, 2, (1, 9), 19, 2, False)

    with pytest.raises(UserWarning, match="weak curve"):
        Curve(11, 2, 7, (6, 9), 7, 2, True)


def test_secp256k1() -> None:
    assert secp256k1 is CURVES["secp256k1"]
    assert secp256k1.name == "secp256k1"
    assert secp256k1.p_size == 32
    assert secp256k1.n_size == 32
    assert secp256k1.nlen == 256
    assert secp256k1.h == 1
    assert secp256k1.p_is_3_mod_4
    assert secp256k1.a == 0
    assert secp256k1.b == 7

    G = secp256k1.generator()
    assert G.affine() == secp256k1.G
    # a fresh copy each time
    assert G is not secp256k1.generator()
    assert secp256k1.y_even(G.x) == G.y
    assert secp256k1.point_from_x(0, G.x) == G
    assert secp256k1.point_from_x(1, G.x) == -G


def test_projective_coordinates() -> None:
    for ec in all_curves.values():
        G = ec.generator()
        assert ec.is_on_curve(G)
        # the same point with a different Z
        Z = 2
        G2 = CurvePoint(ec, G.x * Z % ec.p, G.y * Z % ec.p, Z)
        assert G2 == G
        assert G2.affine() == G.affine()
        assert hash(G2) == hash(G)

        INF = ec.infinity()
        assert INF.is_infinity
        assert ec.is_infinity(INF)
        assert ec.is_on_curve(INF)
        assert not ec.is_infinity(G)


def test_point_from_x() -> None:
    for ec in low_card_curves.values():
        for x in range(ec.p):
            try:
                Q_even = ec.point_from_x(0, x)
            except EOSK1ValueError:
                with pytest.raises(EOSK1ValueError, match="invalid x-coordinate: "):
                    ec.y(x)
                continue
            assert ec.is_on_curve(Q_even)
            assert Q_even.y % 2 == 0 or Q_even.y == 0
            Q_odd = ec.point_from_x(1, x)
            assert ec.is_on_curve(Q_odd)
            if Q_even.y != 0:
                assert Q_odd.y % 2 == 1
                assert Q_odd == -Q_even
            assert ec.y_even(x) == Q_even.y

        err_msg = "x-coordinate not in 0..p-1: "
        with pytest.raises(EOSK1ValueError, match=err_msg):
            ec.y(ec.p)
        with pytest.raises(EOSK1ValueError, match=err_msg):
            ec.y(-1)

        G = ec.generator()
        with pytest.raises(EOSK1ValueError, match="invalid parity: "):
            ec.point_from_x(2, G.x)


def test_is_on_curve() -> None:
    for ec in all_curves.values():
        G = ec.generator()
        P = CurvePoint(ec, G.x, (G.y + 1) % ec.p)
        assert not ec.is_on_curve(P)
        with pytest.raises(EOSK1ValueError, match="point not on curve"):
            ec.require_on_curve(P)
        with pytest.raises(EOSK1ValueError, match="point not on curve"):
            ec.validate(P)
        ec.validate(G)
        ec.validate(G.mult(2))

        with pytest.raises(EOSK1TypeError, match="not a point: "):
            ec.is_on_curve("not a point")  # type: ignore

    # a point of a different curve
    assert not secp256k1.is_on_curve(ec13_11.generator())
    assert not ec13_11.is_on_curve(secp256k1.generator())


def test_equality() -> None:
    ec = Curve(13, 7, 6, (1, 1), 11, 1, False)
    assert ec == ec13_11
    assert hash(ec) == hash(ec13_11)
    assert ec != low_card_curves["ec13_19"]
    assert ec != secp256k1
    # same curve, same group
    assert CurveGroup(13, 7, 6) == CurveGroup(13, 7, 6)
    assert CurveGroup(13, 7, 6) != CurveGroup(13, 0, 2)
    assert ec.generator() == ec13_11.generator()


def test_str_repr() -> None:
    assert repr(ec13_11) == "Curve(13, 7, 6, (1, 1), 11, 1)"
    expected = "Curve\n p   = 13\n a   = 7\n b   = 6"
    expected += "\n x_G = 1\n y_G = 1\n n   = 11\n h   = 1"
    assert str(ec13_11) == expected

    assert repr(CurveGroup(13, 7, 6)) == "Curve(13, 7, 6)"

    ec_repr = repr(secp256k1)
    assert ec_repr.startswith("Curve('FFFFFFFF FFFFFFFF")
    assert ec_repr.endswith(", 1)")
    assert "\n x_G = 79BE667E F9DCBBAC" in str(secp256k1)
