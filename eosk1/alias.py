#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Aliases

mypy aliases, documenting also coding input conventions.
"""

from io import BytesIO
from typing import Any, Callable, Union

# Octets are a sequence of eight-bit bytes or a hex-string (not text string)
#
# hex-strings are strings that can be converted to bytes using bytes.fromhex,
# e.g.:
# "deadbeef"
# "dead beef"
# "02 79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
#
# use eosk1.utils.bytes_from_octets to convert Octets to bytes
#
# Octets are used for SEC public keys, message hashes (32 bytes),
# dsa.Sig (DER serialization of ECDSA signature),
# sig_k1.K1Sig (65 bytes compact serialization)
Octets = Union[bytes, str]

# bytes or text string (not hex-string)
#
# this is for string that can be
# converted to bytes using encode()
# e.g. a message to be signed
#    if isinstance(msg, str):
#        msg = msg.encode()
#
# or 'ascii' strings like base58 encoded keys and signatures:
# "5KQwrPbwdL6PhXujxW37FSSQZ1JiwsST4cqQzDeyXtP79zkvFD3"
# "EOS6MRyAjQq8ud7hVNYcfnVPJqcVpscN5So8BhtHuGYqET5GDW5CV"
#
# In almost all cases (but messages to be signed)
# leading/trailing blanks should always be stripped
String = Union[bytes, str]

# binary data, usually to be consumed as byte stream,
# but possibly provided as Octets too
BinaryData = Union[BytesIO, Octets]

# hex-string or bytes representation of an int
Integer = Union[bytes, str, int]

# Hash digest constructor, e.g. hashlib.sha256
HashF = Callable[[], Any]
