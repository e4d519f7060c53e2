# SPDX-License-Identifier: GPL-2.0-only
# +-----------------+
# | boot header     | 1 page
# +-----------------+
# | kernel          | n pages
# +-----------------+
# | ramdisk         | m pages
# +-----------------+
# | second stage    | o pages
# +-----------------+
# |                 | 1 page
# +-----------------+
# | device tree     | p pages
# +-----------------+
#
# n = (kernel_size + page_size - 1) / page_size
# m = (ramdisk_size + page_size - 1) / page_size
# o = (second_size + page_size - 1) / page_size
# p = (dt_size + page_size - 1) / page_size
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import List

from bootimg import Header, ZeroPageSizeError


@unique
class Label(Enum):
	KERNEL = 'kernel', 'Kernel', '-kernel', False
	RAMDISK = 'ramdisk', 'Ramdisk', '-ramdisk.gz', False
	SECOND = 'second', 'Second Stage', '-second.gz', True
	DEVICE_TREE = 'dt', 'DeviceTree', '.dtb', True

	def __new__(cls, value: str, title: str, suffix: str, optional: bool) -> Label:
		obj = object.__new__(cls)
		obj._value_ = value
		obj.title = title
		# Appended to the image base name to form the output file name
		obj.suffix = suffix
		# Optional segments are skipped entirely when their size is 0
		obj.optional = optional
		return obj


@dataclass(frozen=True)
class Segment:
	label: Label
	offset: int
	size: int

	@property
	def absent(self) -> bool:
		return self.label.optional and self.size == 0


def pages(size: int, page_size: int) -> int:
	return (size + page_size - 1) // page_size


def layout(header: Header) -> List[Segment]:
	page_size = header.page_size
	if page_size == 0:
		raise ZeroPageSizeError()

	kernel_offset = page_size
	ramdisk_offset = kernel_offset + pages(header.kernel_size, page_size) * page_size
	second_offset = ramdisk_offset + pages(header.ramdisk_size, page_size) * page_size
	# The device tree starts one page later than the second stage padding
	# suggests. Real images are laid out this way, keep the extra page.
	dt_offset = second_offset + (pages(header.second_size, page_size) + 1) * page_size

	return [
		Segment(Label.KERNEL, kernel_offset, header.kernel_size),
		Segment(Label.RAMDISK, ramdisk_offset, header.ramdisk_size),
		Segment(Label.SECOND, second_offset, header.second_size),
		Segment(Label.DEVICE_TREE, dt_offset, header.dt_size),
	]
