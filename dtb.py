# SPDX-License-Identifier: GPL-2.0-only
# Summarize the device tree segment of a boot image. This is purely
# informational, extraction never depends on it.
from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterator, List, Tuple

import libfdt

from bootimg import printable
from fdt2 import FDT_HEADER_SIZE, Fdt2, fdt_blob_size

FDT_MAGIC = b'\xd0\x0d\xfe\xed'
QCDT_MAGIC = 'QCDT'.encode()

QCDT_HEADER_FORMAT = '<4sII'
QCDT_HEADER_SIZE = struct.calcsize(QCDT_HEADER_FORMAT)

QCDT_ENTRY_FORMATS = (
	'<IIIII',
	'<IIIIII',
	'<IIIIIIIIII',
)


@dataclass
class DTRecord:
	plat_id: int
	variant_id: int
	subtype_id: int
	offset: int
	size: int
	soc_rev: int = 0
	pmic: Tuple[int, int, int, int] = (0, 0, 0, 0)


def _describe_fdt(data: bytes) -> str:
	# libfdt trusts the offsets in the header, never hand it less than it declares
	if len(data) < FDT_HEADER_SIZE or fdt_blob_size(data) > len(data):
		return "invalid device tree (truncated)"

	try:
		fdt = Fdt2(data)
		model = b', '.join(fdt.getprop_bytestrings(0, 'model'))
		compatible = b', '.join(fdt.getprop_bytestrings(0, 'compatible'))
	except libfdt.FdtException as e:
		return f"invalid device tree ({e})"

	return f"model: {printable(model) or '(none)'}, compatible: {printable(compatible) or '(none)'}"


# Appended DTBs are simply concatenated
def _split_fdts(data: bytes) -> Iterator[bytes]:
	offset = 0
	while data[offset:offset + len(FDT_MAGIC)] == FDT_MAGIC and offset + 8 <= len(data):
		size = fdt_blob_size(data[offset:])
		if size == 0:
			break
		yield data[offset:offset + size]
		if offset + size > len(data):
			break
		offset += size


def parse_qcdt(data: bytes) -> List[DTRecord]:
	magic, version, n = struct.unpack(QCDT_HEADER_FORMAT, data[:QCDT_HEADER_SIZE])
	if magic != QCDT_MAGIC:
		raise ValueError("Image does not appear to be an QCDT image")
	if not 1 <= version <= len(QCDT_ENTRY_FORMATS):
		raise ValueError(f"Unsupported QCDT version: {version}")

	entry_format = QCDT_ENTRY_FORMATS[version - 1]
	size = struct.calcsize(entry_format)

	records = []
	offset = QCDT_HEADER_SIZE
	for i in range(0, n):
		if offset + size > len(data):
			raise ValueError(f"QCDT table truncated at entry {i}")
		entry = struct.unpack(entry_format, data[offset:offset + size])
		offset += size

		r = DTRecord(entry[0], entry[1], entry[2], entry[-2], entry[-1])

		if version >= 2:
			r.soc_rev = entry[3]
		if version >= 3:
			r.pmic = (entry[4], entry[5], entry[6], entry[7])

		if r.offset + r.size > len(data):
			raise ValueError(f"QCDT entry {i} out of bounds")

		records.append(r)

	return records


def _describe_qcdt(data: bytes) -> List[str]:
	try:
		records = parse_qcdt(data)
	except (ValueError, struct.error) as e:
		return [f"QCDT: invalid table ({e})"]

	lines = [f"QCDT: {len(records)} entries"]
	for r in records:
		s = f"plat_{r.plat_id:x}-var_{r.variant_id:x}-sub_{r.subtype_id:x}"
		if r.soc_rev:
			s += f" soc_rev 0x{r.soc_rev:x}"
		if any(r.pmic):
			s += " pmic " + '/'.join(f'0x{p:x}' for p in r.pmic)
		s += f" @ 0x{r.offset:08x} ({r.size} bytes): "
		s += _describe_fdt(data[r.offset:r.offset + r.size])
		lines.append(s)
	return lines


def describe(data: bytes) -> List[str]:
	if data[:len(QCDT_MAGIC)] == QCDT_MAGIC:
		return _describe_qcdt(data)

	if data[:len(FDT_MAGIC)] == FDT_MAGIC:
		return [f"FDT {i} ({fdt_blob_size(b)} bytes): {_describe_fdt(b)}"
			for i, b in enumerate(_split_fdts(data))]

	return [f"Unknown device tree format (magic: {data[:4].hex()})"]
