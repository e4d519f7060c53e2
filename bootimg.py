# SPDX-License-Identifier: GPL-2.0-only
# Android boot image header, as defined in system/core/mkbootimg/bootimg.h
#
# struct boot_img_hdr {
#	unsigned char magic[BOOT_MAGIC_SIZE];
#	unsigned kernel_size;  /* size in bytes */
#	unsigned kernel_addr;  /* physical load addr */
#	unsigned ramdisk_size; /* size in bytes */
#	unsigned ramdisk_addr; /* physical load addr */
#	unsigned second_size;  /* size in bytes */
#	unsigned second_addr;  /* physical load addr */
#	unsigned tags_addr;    /* physical addr for kernel tags */
#	unsigned page_size;    /* flash page size we assume */
#	unsigned dt_size;      /* device tree in bytes */
#	unsigned unused;       /* future expansion: should be 0 */
#	unsigned char name[BOOT_NAME_SIZE]; /* asciiz product name */
#	unsigned char cmdline[BOOT_ARGS_SIZE];
#	unsigned id[8]; /* timestamp / checksum / sha1 / etc */
# };
from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, Tuple

BOOT_MAGIC = 'ANDROID!'.encode()
BOOT_MAGIC_SIZE = 8
BOOT_NAME_SIZE = 16
BOOT_ARGS_SIZE = 512
BOOT_ID_WORDS = 8

# Fields following the magic, in on-disk order
HEADER_FIELDS = (
	('kernel_size', '<I'),
	('kernel_addr', '<I'),
	('ramdisk_size', '<I'),
	('ramdisk_addr', '<I'),
	('second_size', '<I'),
	('second_addr', '<I'),
	('tags_addr', '<I'),
	('page_size', '<I'),
	('dt_size', '<I'),
	('unused', '<I'),
	('name', f'<{BOOT_NAME_SIZE}s'),
	('cmdline', f'<{BOOT_ARGS_SIZE}s'),
	('id', f'<{BOOT_ID_WORDS}I'),
)

HEADER_SIZE = BOOT_MAGIC_SIZE + sum(struct.calcsize(fmt) for _, fmt in HEADER_FIELDS)


class FormatError(ValueError):
	pass


class BadMagicError(FormatError):
	def __init__(self, magic: bytes) -> None:
		super().__init__(f"Android magic not found (got {magic!r}), image does not appear to be an Android boot image")
		self.magic = magic


class ZeroPageSizeError(FormatError):
	def __init__(self) -> None:
		super().__init__("Header declares a page size of 0")


class ShortReadError(OSError):
	def __init__(self, what: str, expected: int, actual: int) -> None:
		super().__init__(f"Short read on {what}: expected {expected} bytes, got {actual}")
		self.what = what
		self.expected = expected
		self.actual = actual


@dataclass(frozen=True)
class Header:
	magic: bytes
	kernel_size: int
	kernel_addr: int
	ramdisk_size: int
	ramdisk_addr: int
	second_size: int
	second_addr: int
	tags_addr: int
	page_size: int
	dt_size: int
	unused: int
	name: bytes
	cmdline: bytes
	id: Tuple[int, ...]


def read_exactly(f: BinaryIO, size: int, what: str) -> bytes:
	b = f.read(size)
	if len(b) != size:
		raise ShortReadError(what, size, len(b))
	return b


def decode(f: BinaryIO) -> Header:
	"""Decode the boot image header at the current position of f.

	The magic is checked before anything else is read. Each field is read
	separately so that a truncated image is reported at the field where the
	data ran out.
	"""
	magic = read_exactly(f, BOOT_MAGIC_SIZE, 'magic')
	if magic != BOOT_MAGIC:
		raise BadMagicError(magic)

	values = {}
	for name, fmt in HEADER_FIELDS:
		b = read_exactly(f, struct.calcsize(fmt), name)
		v = struct.unpack(fmt, b)
		values[name] = v if name == 'id' else v[0]

	return Header(magic=magic, **values)


# Board name and command line come straight from the image, never print them raw
def printable(b: bytes) -> str:
	s = b.rstrip(b'\0').decode('ascii', 'backslashreplace')
	return ''.join(c if c.isprintable() else f'\\x{ord(c):02x}' for c in s)
