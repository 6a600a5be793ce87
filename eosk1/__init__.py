#!/usr/bin/env python3

# Copyright (C) 2019-2022 The eosk1 developers
#
# This file is part of eosk1. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of eosk1 including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"__init__ module for the eosk1 package."

name = "eosk1"
__version__ = "2022.9.1"
__author__ = "The eosk1 developers"
__author_email__ = "devs@eosk1.org"
__copyright__ = "Copyright (C) 2019-2022 The eosk1 developers"
__license__ = "MIT License"
