# SPDX-License-Identifier: GPL-2.0-only
import sys

from split_bootimg import main

sys.exit(main())
