# SPDX-License-Identifier: GPL-2.0-only

# Extend libfdt with some utility methods
import struct

from libfdt import *

FDT_HEADER_FORMAT = '>II'  # magic, totalsize
FDT_HEADER_SIZE = 40  # version 17 header


def fdt_blob_size(data: bytes) -> int:
	magic, totalsize = struct.unpack(FDT_HEADER_FORMAT, data[:struct.calcsize(FDT_HEADER_FORMAT)])
	return totalsize


class Fdt2(FdtRo):
	def getprop(self, nodeoffset, prop_name, quiet=()):
		try:
			return super().getprop(nodeoffset, prop_name, quiet)
		except FdtException:
			print(f"WARNING: Failed to get property: {prop_name}")
			raise

	def getprop_or_none(self, nodeoffset, prop_name):
		prop = self.getprop(nodeoffset, prop_name, [FDT_ERR_NOTFOUND])
		if prop == -FDT_ERR_NOTFOUND:
			return None
		return prop

	def getprop_bytestrings(self, nodeoffset, prop_name):
		prop = self.getprop_or_none(nodeoffset, prop_name)
		if prop is None:
			return []
		return prop.as_bytestrings()


def property_as_bytestrings(self):
	if len(self) == 0:
		return []
	if self[-1] != 0:
		return [bytes(self)]
	return bytes(self[:-1]).split(b'\0')


Property.as_bytestrings = property_as_bytestrings
