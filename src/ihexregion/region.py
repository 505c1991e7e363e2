# Copyright (c) 2013-2025, Andrea Zoppi
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright
#    notice, this list of conditions and the following disclaimer in the
#    documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

r"""Contiguous memory regions."""

from typing import IO
from typing import Any
from typing import Iterator

from .base import AnyBytes
from .base import NonContiguousError
from .record import IhexRecord
from .utils import chop


class Region:
    r"""Contiguous run of bytes, anchored at an absolute address.

    The absolute address of the first byte is split into two parts, as per
    the Intel HEX linear addressing scheme:
    :attr:`base_address` holds the upper 16 bits (set by the latest
    *Extended Linear Address* record), while :attr:`offset` holds the lower
    16 bits (the offset of the first *Data* byte).

    Bytes can only be appended, with strictly increasing offsets and no
    gaps; as the offset is 16-bit wide, a region holds up to 64 KiB.

    Attributes:
        base_address (int):
            Upper 16 bits of the 32-bit address, lower bits cleared.

        offset (int):
            Lower 16 bits of the address of the first byte.
            It is set by the first :meth:`insert` upon an empty region.

    Args:
        base_address (int):
            See :attr:`base_address` attribute.

    Examples:
        >>> region = Region(0x00010000)
        >>> region.write(0x8000, b'abc')
        >>> hex(region.address()), len(region), region.data
        ('0x18000', 3, b'abc')
    """

    def __bytes__(self) -> bytes:

        return bytes(self._data)

    def __eq__(self, other: Any) -> bool:

        if not isinstance(other, Region):
            return NotImplemented

        return (self.base_address == other.base_address and
                self.offset == other.offset and
                self._data == other._data)

    def __init__(self, base_address: int = 0):

        base_address = base_address.__index__()
        if not 0 <= base_address <= 0xFFFFFFFF:
            raise ValueError('address overflow')

        self.base_address: int = base_address
        self.offset: int = 0
        self._data: bytearray = bytearray()

    def __len__(self) -> int:

        return len(self._data)

    def __repr__(self) -> str:

        return (f'<{self.__class__!s} @0x{id(self):08X} '
                f'address:=0x{self.address():08X} size:=0x{len(self):X}>')

    def address(self) -> int:
        r"""Absolute address of the first byte.

        Returns:
            int: :attr:`base_address` plus :attr:`offset`.
        """

        return self.base_address + self.offset

    def contains(self, address: int) -> bool:
        r"""Tells whether an address falls within the region.

        Args:
            address (int):
                Absolute address.

        Returns:
            bool: `address` is within the region data.

        Examples:
            >>> region = Region()
            >>> region.write(0x100, b'abcd')
            >>> region.contains(0x0FF), region.contains(0x100), region.contains(0x103)
            (False, True, True)
            >>> region.contains(0x104)
            False
        """

        start = self.address()
        return start <= address < start + len(self._data)

    @property
    def data(self) -> bytes:
        r"""bytes: Copy of the region data."""

        return bytes(self._data)

    def dump_data(self, stream: IO, width: int = 16) -> 'Region':
        r"""Writes a human-readable hexadecimal dump.

        Each line starts with the address of its first byte, followed by up
        to `width` bytes::

            0x00010000 : 00 01 02 03

        Nothing is written for an empty region.

        Args:
            stream (bytes IO):
                Output byte stream.

            width (int):
                Number of bytes per line.

        Returns:
            :class:`Region`: *self*.
        """

        address = self.address()

        for chunk in chop(self._data, width):
            line = b'0x%08x :' % (address & 0xFFFFFFFF)
            line += b''.join(b' %02x' % value for value in chunk)
            stream.write(line + b'\n')
            address += len(chunk)

        return self

    def dump_ihex(
        self,
        stream: IO,
        width: int = 32,
        color: bool = False,
    ) -> 'Region':
        r"""Writes the region as Intel HEX records.

        See :meth:`to_records` for the generated record sequence.
        No *End Of File* record is written.

        Args:
            stream (bytes IO):
                Output byte stream.

            width (int):
                Maximum number of data bytes per record.

            color (bool):
                Colorizes record tokens with ANSI color codes.

        Returns:
            :class:`Region`: *self*.
        """

        for record in self.to_records(width):
            record.print(stream=stream, color=color)
        return self

    def insert(self, offset: int, value: int) -> None:
        r"""Appends a byte.

        The first byte of an empty region sets :attr:`offset`.
        Any further byte must immediately follow the last one.

        Args:
            offset (int):
                16-bit offset of the byte.

            value (int):
                Byte value.

        Raises:
            :class:`NonContiguousError`: The byte would leave a gap, or go
                backwards, or fall beyond the 64 KiB segment.

        Examples:
            >>> region = Region()
            >>> region.insert(0x10, 0xAA)
            >>> region.insert(0x11, 0xBB)
            >>> region.insert(0x13, 0xCC)
            Traceback (most recent call last):
                ...
            ihexregion.base.NonContiguousError: region does not contain continuous data: offset 0x0013, expected 0x0012
        """

        offset = offset.__index__()
        if offset < 0:
            raise ValueError('offset overflow')

        value = value.__index__()
        if not 0 <= value <= 0xFF:
            raise ValueError('byte overflow')

        data = self._data
        if data:
            expected = self.offset + len(data)
            if offset != expected:
                raise NonContiguousError(offset, expected)

        if offset > 0xFFFF:
            raise NonContiguousError(offset)

        if not data:
            self.offset = offset
        data.append(value)

    def move_base_address(self, address: int) -> 'Region':
        r"""Relocates the region.

        The data is left untouched, only the address changes.
        No check is made against overlapping with other regions.

        Args:
            address (int):
                New absolute address of the first byte.

        Returns:
            :class:`Region`: *self*.

        Examples:
            >>> region = Region()
            >>> region.write(0, b'abc')
            >>> _ = region.move_base_address(0x12345678)
            >>> hex(region.base_address), hex(region.offset)
            ('0x12340000', '0x5678')
        """

        address = address.__index__()
        if not 0 <= address <= 0xFFFFFFFF:
            raise ValueError('address overflow')

        self.base_address = address & 0xFFFF0000
        self.offset = address & 0x0000FFFF
        return self

    def to_records(self, width: int = 32) -> Iterator[IhexRecord]:
        r"""Splits the region into Intel HEX records.

        An *Extended Linear Address* record for :attr:`base_address` comes
        first, followed by *Data* records of up to `width` bytes each.

        If the region crosses a 64 KiB boundary (only possible after a
        relocation), the data record is split there, and a new
        *Extended Linear Address* record is generated.

        Args:
            width (int):
                Maximum number of data bytes per record, up to 255.

        Yields:
            :class:`IhexRecord`: Record sequence.

        Examples:
            >>> region = Region(0x00010000)
            >>> region.write(0, bytes(range(10)))
            >>> [str(record) for record in region.to_records(4)]  # doctest: +NORMALIZE_WHITESPACE
            [':020000040001F9\n', ':0400000000010203F6\n',
             ':0400040004050607E2\n', ':020008000809E5\n']
        """

        width = width.__index__()
        if not 0 < width <= 0xFF:
            raise ValueError('invalid width')

        Record = IhexRecord
        extension = self.base_address
        yield Record.create_extended_linear_address(extension)

        data = self._data
        size = len(data)
        address = self.address()
        index = 0

        while index < size:
            if (address & 0xFFFF0000) != extension:
                extension = address & 0xFFFF0000
                yield Record.create_extended_linear_address(extension)

            length = min(width, size - index, 0x10000 - (address & 0xFFFF))
            yield Record.create_data(address, data[index:(index + length)])
            index += length
            address = (address + length) & 0xFFFFFFFF

    def write(self, offset: int, data: AnyBytes) -> None:
        r"""Appends bytes, starting from some offset.

        It calls :meth:`insert` for each byte of `data`, at increasing
        offsets.

        Args:
            offset (int):
                16-bit offset of the first byte.

            data (bytes):
                Bytes to append.

        Raises:
            :class:`NonContiguousError`: Data would not be contiguous.
        """

        for index, value in enumerate(data):
            self.insert(offset + index, value)
