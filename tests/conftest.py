# SPDX-License-Identifier: GPL-2.0-only
import os
import struct

import pytest

from bootimg import BOOT_MAGIC

KERNEL_ADDR = 0x10008000
RAMDISK_ADDR = 0x11000000
SECOND_ADDR = 0x10f00000
TAGS_ADDR = 0x10000100


def build_header(page_size=2048, kernel_size=0, ramdisk_size=0, second_size=0, dt_size=0,
		 name=b'', cmdline=b'', magic=BOOT_MAGIC):
	return (magic
		+ struct.pack('<10I', kernel_size, KERNEL_ADDR, ramdisk_size, RAMDISK_ADDR,
			      second_size, SECOND_ADDR, TAGS_ADDR, page_size, dt_size, 0)
		+ name.ljust(16, b'\0')
		+ cmdline.ljust(512, b'\0')
		+ struct.pack('<8I', *range(1, 9)))


def build_image(page_size=2048, kernel=b'', ramdisk=b'', second=b'', dt=b'', **kwargs):
	header = build_header(page_size, len(kernel), len(ramdisk), len(second), len(dt), **kwargs)
	if page_size == 0:
		return header

	def pad(b):
		return b + bytes(-len(b) % page_size)

	# One page of padding sits between the second stage and the device tree
	return pad(header) + pad(kernel) + pad(ramdisk) + pad(second) + bytes(page_size) + pad(dt)


@pytest.fixture
def image_file(tmp_path):
	def write(data, name='boot.img'):
		path = tmp_path / name
		path.write_bytes(data)
		return str(path)
	return write


@pytest.fixture
def payloads():
	return {
		'kernel': os.urandom(5000),
		'ramdisk': os.urandom(100),
		'dt': os.urandom(300),
	}


FDT_BEGIN_NODE = 1
FDT_END_NODE = 2
FDT_PROP = 3
FDT_END = 9


def _pad4(b):
	return b + bytes(-len(b) % 4)


# Minimal flattened device tree with properties on the root node only
def build_fdt(**props):
	dt_struct = struct.pack('>I', FDT_BEGIN_NODE) + _pad4(b'\0')
	strings = b''
	for name, value in props.items():
		if isinstance(value, str):
			value = value.encode() + b'\0'
		dt_struct += struct.pack('>III', FDT_PROP, len(value), len(strings)) + _pad4(value)
		strings += name.encode() + b'\0'
	dt_struct += struct.pack('>II', FDT_END_NODE, FDT_END)
	strings = _pad4(strings)

	off_mem_rsvmap = 40
	off_dt_struct = off_mem_rsvmap + 16
	off_dt_strings = off_dt_struct + len(dt_struct)
	totalsize = off_dt_strings + len(strings)

	header = struct.pack('>10I', 0xd00dfeed, totalsize, off_dt_struct, off_dt_strings, off_mem_rsvmap,
			     17, 16, 0, len(strings), len(dt_struct))
	return header + bytes(16) + dt_struct + strings
