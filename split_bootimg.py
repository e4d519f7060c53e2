# SPDX-License-Identifier: GPL-2.0-only
from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

import dtb
from bootimg import FormatError, Header, decode, printable
from extract import Namer, Result, extract, output_namer
from layout import Label, layout
from options import Options


def print_header(h: Header) -> None:
	print(f"Page size:  {h.page_size} (0x{h.page_size:08x}) byte")
	print(f"Kernel:     0x{h.kernel_size:08x} byte @ 0x{h.kernel_addr:08x}")
	print(f"Ramdisk:    0x{h.ramdisk_size:08x} byte @ 0x{h.ramdisk_addr:08x}")
	print(f"Second:     0x{h.second_size:08x} byte @ 0x{h.second_addr:08x}")
	print(f"DeviceTree: 0x{h.dt_size:08x} byte")
	print(f"Board name: {printable(h.name)}")
	print(f"Command line: {printable(h.cmdline)}")


def print_result(r: Result, namer: Namer) -> None:
	s = r.segment
	name = namer(s.label)
	print(f"Writing {s.label.title:<12} from 0x{s.size:08x} @ 0x{s.offset:08x} to {name:<30} ...", end='')
	print(" no data." if r.absent else " complete.")


def write_cmdline(h: Header, name: str) -> None:
	with open(name, 'w') as o:
		o.write(h.cmdline.rstrip(b'\0').decode('ascii', 'backslashreplace'))
	print(f"Command line written to {name}")


def describe_dt(name: str) -> None:
	base = os.path.splitext(name)[0]
	print(f"Convert DTB using    dtc -I dtb -s {name} -O dts -o {base}.dts")

	with open(name, 'rb') as f:
		for line in dtb.describe(f.read()):
			print(f"  {line}")


def split(options: Options) -> List[Result]:
	f = options.image
	print(f"Parsing: {f.name}")

	header = decode(f)
	print_header(header)

	plan = layout(header)

	os.makedirs(options.output_dir, exist_ok=True)
	namer = output_namer(f.name, options.output_dir)
	report = extract(f, plan, namer, progress=lambda r: print_result(r, namer))

	if options.cmdline:
		write_cmdline(header, os.path.join(options.output_dir, os.path.basename(f.name) + '-cmdline.txt'))

	dt = next(r for r in report if r.segment.label == Label.DEVICE_TREE)
	if dt.absent:
		print("No device tree.")
	elif options.describe:
		describe_dt(dt.name)

	return report


def main(argv: Optional[List[str]] = None) -> int:
	parser = argparse.ArgumentParser(
		description="Split an Android boot image into kernel, ramdisk, second stage and device tree")
	parser.add_argument('image', type=argparse.FileType('rb'), help="Boot image to split")
	parser.add_argument('-o', '--output-dir', default='.', help="Directory to write the segments to")
	parser.add_argument('--cmdline', action='store_true', help="""
		Also write the kernel command line from the header to <image>-cmdline.txt
	""")
	parser.add_argument('--no-describe', dest='describe', action='store_false', default=True, help="""
		Do not print a summary (model, compatible, QCDT entries) of the extracted device tree.
	""")
	args = parser.parse_args(argv, namespace=Options())

	with args.image:
		try:
			split(args)
		except (FormatError, OSError) as e:
			print(f"ERROR: {e}")
			return 1

	return 0


if __name__ == '__main__':
	sys.exit(main())
