#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Exception classes.

The three base classes are only meant to discriminate between
Exceptions raised by eosk1 and those raised by other codebase.

Users are usually better off just dealing with the regular
ValueError, TypeError, and RuntimeError
from which the eosk1 versions are derived.
The specialized subclasses name the failure modes
of the signing and recovery protocol.
"""


class EOSK1ValueError(ValueError):
    pass


class EOSK1TypeError(TypeError):
    pass


class EOSK1RuntimeError(RuntimeError):
    pass


class InvalidEncodingError(EOSK1ValueError):
    "Wrong length, unknown tag byte, or malformed serialization."


class InvalidRecoveryIdError(EOSK1ValueError):
    "Recovery id outside the [0, 3] range."


class NonInvertibleError(EOSK1RuntimeError):
    "Modular inverse requested for a non-invertible element."


class DegenerateNonceError(EOSK1RuntimeError):
    "Candidate nonce leads to INF, r = 0, or s = 0."


class NonCanonicalLengthError(EOSK1RuntimeError):
    "r or s is not a 32 bytes DER integer."


class RecoveryFailedError(EOSK1RuntimeError):
    "No recovery id reproduces the expected public key."


class IterationBudgetExceededError(EOSK1RuntimeError):
    "A rejection-sampling or retry loop exceeded its cap."
