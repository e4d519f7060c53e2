# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO


@dataclass(init=False)
class Options:
	image: BinaryIO
	output_dir: str
	cmdline: bool
	describe: bool
