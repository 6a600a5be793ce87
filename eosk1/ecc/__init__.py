#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Module eosk1.ecc."""

from eosk1.ecc.curve import CURVES, Curve, CurveGroup, secp256k1
from eosk1.ecc.number_theory import mod_inv, mod_sqrt
from eosk1.ecc.point import CurvePoint
from eosk1.ecc.sec_point import bytes_from_point, point_from_octets

__all__ = [
    "CURVES",
    "Curve",
    "CurveGroup",
    "CurvePoint",
    "secp256k1",
    "mod_inv",
    "mod_sqrt",
    "bytes_from_point",
    "point_from_octets",
]
