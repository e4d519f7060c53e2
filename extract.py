# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import BinaryIO, Callable, List, Optional

from bootimg import ShortReadError
from layout import Label, Segment

CHUNK_SIZE = 1024 * 1024

Namer = Callable[[Label], str]
SinkFactory = Callable[[str], BinaryIO]


class ExtractionError(OSError):
	def __init__(self, segment: Segment, name: Optional[str], cause: OSError) -> None:
		super().__init__(f"Failed to extract {segment.label.value} to {name}: {cause}")
		self.segment = segment
		self.name = name
		self.cause = cause


@dataclass
class Result:
	segment: Segment
	name: Optional[str] = None
	written: Optional[int] = None  # None if the segment is absent

	@property
	def absent(self) -> bool:
		return self.written is None


def output_namer(image: str, output_dir: str = '.') -> Namer:
	base = os.path.basename(image)

	def name(label: Label) -> str:
		return os.path.join(output_dir, base + label.suffix)
	return name


def _create(name: str) -> BinaryIO:
	return open(name, 'wb')


def extract_segment(f: BinaryIO, segment: Segment, name: str, create: SinkFactory = _create) -> int:
	f.seek(segment.offset)

	remaining = segment.size
	with create(name) as o:
		while remaining:
			chunk = f.read(min(remaining, CHUNK_SIZE))
			if not chunk:
				raise ShortReadError(segment.label.value, segment.size, segment.size - remaining)
			o.write(chunk)
			remaining -= len(chunk)

	return segment.size


def extract(f: BinaryIO, plan: List[Segment], namer: Namer, create: SinkFactory = _create,
	    progress: Optional[Callable[[Result], None]] = None) -> List[Result]:
	"""Copy every segment of the plan from f into its own output.

	Absent optional segments produce no output. The first failure aborts the
	remaining segments, outputs written so far are kept.
	"""
	report = []
	for segment in plan:
		r = Result(segment)
		if not segment.absent:
			r.name = namer(segment.label)
			try:
				r.written = extract_segment(f, segment, r.name, create)
			except OSError as e:
				raise ExtractionError(segment, r.name, e) from e

		report.append(r)
		if progress:
			progress(r)

	return report
