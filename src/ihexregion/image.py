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

r"""Memory image assembly and manipulation.

An *image* is the ordered collection of contiguous :class:`Region` objects
decoded from an Intel HEX file.
"""

import enum
import io
from typing import IO
from typing import Iterable
from typing import Iterator
from typing import List
from typing import Optional
from typing import Tuple
from typing import Union

from bytesparse import Memory

from .base import AnyBytes
from .base import AnyLine
from .base import ChecksumError
from .base import UnimplementedRecordTypeError
from .base import UnknownRecordTypeError
from .record import IhexRecord
from .region import Region


class MoveResult(enum.Enum):
    r"""Outcome of :meth:`IhexImage.move_region`.

    Only :attr:`MOVED` evaluates as true.
    """

    MOVED = 'moved'
    r"""Region moved."""

    NOT_FOUND = 'not found'
    r"""No region at the source address."""

    OCCUPIED = 'occupied'
    r"""Some region already at the destination address."""

    def __bool__(self) -> bool:

        return self is MoveResult.MOVED


def _is_line_empty(line: AnyLine) -> bool:

    return not line or line.isspace()


def parse_records(lines: Iterable[AnyLine]) -> Iterator[IhexRecord]:
    r"""Decodes records from lines.

    Empty lines are skipped, but still counted.
    Each record gets its line number stored into :attr:`IhexRecord.coords`.

    Args:
        lines (iterable):
            Lines to decode, either bytes or strings.

    Yields:
        :class:`IhexRecord`: Decoded records.

    Raises:
        :class:`ChecksumError`: Checksum mismatch, with line number.

        :class:`UnknownRecordTypeError`: Unknown record type, with line
            number.

        :class:`UnimplementedRecordTypeError`: Unsupported record type, with
            line number.
    """

    row = 0

    for line in lines:
        row += 1

        if _is_line_empty(line):
            continue

        try:
            record = IhexRecord.parse(line)
        except (ChecksumError, UnknownRecordTypeError, UnimplementedRecordTypeError) as e:
            raise e.at_line(row) from None

        record.coords = (row, 0)
        yield record


def assemble(records: Iterable[IhexRecord]) -> List[Region]:
    r"""Folds records into regions.

    Data bytes are appended to the *current* region, which is closed by the
    next *Extended Linear Address* record (starting a new region at the
    carried base address), by the *End Of File* record, or by the end of the
    record sequence.
    Empty regions are discarded.
    Anything after the *End Of File* record is ignored.

    Args:
        records (iterable):
            Records to assemble.

    Returns:
        list of :class:`Region`: Regions, in order of appearance.

    Raises:
        :class:`NonContiguousError`: Data of a region is not contiguous.

    Examples:
        >>> records = [
        ...     IhexRecord.create_extended_linear_address(0x10000),
        ...     IhexRecord.create_data(0, b'\xAA'),
        ...     IhexRecord.create_extended_linear_address(0x20000),
        ...     IhexRecord.create_data(0, b'\xBB'),
        ...     IhexRecord.create_end_of_file(),
        ... ]
        >>> [hex(region.address()) for region in assemble(records)]
        ['0x10000', '0x20000']
    """

    regions = []
    region = Region()

    for record in records:
        tag = record.tag

        if tag.is_data():
            region.write(record.offset, record.data)

        elif tag.is_extension():
            if region:
                regions.append(region)
            region = Region(record.address())

        elif tag.is_eof():
            break

    if region:
        regions.append(region)
    return regions


class IhexImage:
    r"""Intel HEX memory image.

    It holds the :class:`Region` objects of a memory image, in order of
    discovery.
    Regions are looked up by their current :meth:`Region.address`, which
    changes when moved.

    Args:
        regions (list):
            Initial regions; none by default.

    Examples:
        >>> buffer = b'''
        ... :020000040001F9
        ... :0400000000010203F6
        ... :00000001FF
        ... '''
        >>> image = IhexImage.parse(buffer)
        >>> [(hex(region.address()), len(region)) for region in image]
        [('0x10000', 4)]
    """

    def __getitem__(self, index: int) -> Region:

        return self.regions[index]

    def __init__(self, regions: Optional[Iterable[Region]] = None):

        self.regions: List[Region] = list(regions or ())

    def __iter__(self) -> Iterator[Region]:

        return iter(self.regions)

    def __len__(self) -> int:

        return len(self.regions)

    def dump_data(self, stream: IO, width: int = 16) -> 'IhexImage':
        r"""Writes a hexadecimal dump of each region.

        See :meth:`Region.dump_data` for details.
        """

        for region in self.regions:
            region.dump_data(stream, width=width)
        return self

    def dump_ihex(
        self,
        stream: IO,
        width: int = 32,
        color: bool = False,
    ) -> 'IhexImage':
        r"""Writes the image as an Intel HEX file.

        Each region is written via :meth:`Region.dump_ihex`, then a single
        *End Of File* record terminates the file.

        Args:
            stream (bytes IO):
                Output byte stream.

            width (int):
                Maximum number of data bytes per record.

            color (bool):
                Colorizes record tokens with ANSI color codes.

        Returns:
            :class:`IhexImage`: *self*.

        Examples:
            >>> image = IhexImage.parse(b':01001000559A\n:00000001FF\n')
            >>> stream = io.BytesIO()
            >>> _ = image.dump_ihex(stream)
            >>> print(stream.getvalue().decode(), end='')
            :020000040000FA
            :01001000559A
            :00000001FF
        """

        for region in self.regions:
            region.dump_ihex(stream, width=width, color=color)
        IhexRecord.create_end_of_file().print(stream=stream, color=color)
        return self

    def erase_region(self, address: int) -> bool:
        r"""Erases the region at some address.

        Args:
            address (int):
                Address of the region to erase, i.e. its first byte.

        Returns:
            bool: The region was found and erased.
        """

        index = self.index(address)
        if index is None:
            return False

        del self.regions[index]
        return True

    def find(self, address: int) -> Optional[Region]:
        r"""Finds the region at some address.

        Args:
            address (int):
                Address of the first byte of the region.

        Returns:
            :class:`Region`: The matching region, or ``None``.
        """

        index = self.index(address)
        return None if index is None else self.regions[index]

    def index(self, address: int) -> Optional[int]:

        for index, region in enumerate(self.regions):
            if region.address() == address:
                return index
        return None

    def info(self, stream: IO) -> 'IhexImage':
        r"""Writes a summary of the regions.

        Each region is listed by its inclusive address range and its size,
        followed by the total data size.

        Args:
            stream (bytes IO):
                Output byte stream.

        Returns:
            :class:`IhexImage`: *self*.

        Examples:
            >>> image = IhexImage.parse(b':01001000559A\n:00000001FF\n')
            >>> stream = io.BytesIO()
            >>> _ = image.info(stream)
            >>> print(stream.getvalue().decode(), end='')
            0x00000010-0x00000010 0x0001
            <BLANKLINE>
            total size: 1 bytes
        """

        for region in self.regions:
            start = region.address()
            size = len(region)
            stream.write(b'0x%08x-0x%08x 0x%04x\n' % (start, start + size - 1, size))

        stream.write(b'\ntotal size: %d bytes\n' % self.total_size())
        return self

    @classmethod
    def load(cls, stream: IO) -> 'IhexImage':
        r"""Loads an image from a stream of lines.

        Args:
            stream (IO):
                Line-iterable stream, either binary or text.

        Returns:
            :class:`IhexImage`: Assembled image.
        """

        return cls(assemble(parse_records(stream)))

    def move_region(self, source: int, target: int) -> MoveResult:
        r"""Moves the region at some address to another address.

        The region data is untouched.

        Warnings:
            Only an exact match of the target address against existing region
            addresses is checked; overlapping regions are not detected.

        Args:
            source (int):
                Address of the region to move.

            target (int):
                New address of the region.

        Returns:
            :class:`MoveResult`: Outcome of the move.

        Examples:
            >>> image = IhexImage.parse(b':01001000559A\n:00000001FF\n')
            >>> image.move_region(0x10, 0x12345678)
            <MoveResult.MOVED: 'moved'>
            >>> image.move_region(0x10, 0x20)
            <MoveResult.NOT_FOUND: 'not found'>
        """

        region = self.find(source)
        if region is None:
            return MoveResult.NOT_FOUND

        if self.find(target) is not None:
            return MoveResult.OCCUPIED

        region.move_base_address(target)
        return MoveResult.MOVED

    @classmethod
    def parse(cls, buffer: Union[AnyBytes, str]) -> 'IhexImage':
        r"""Parses an image from a buffer.

        Args:
            buffer (bytes or str):
                Intel HEX file content.

        Returns:
            :class:`IhexImage`: Assembled image.
        """

        if isinstance(buffer, str):
            stream = io.StringIO(buffer)
        else:
            stream = io.BytesIO(buffer)
        return cls.load(stream)

    def spans(self) -> List[Tuple[int, int]]:
        r"""Address ranges of the regions.

        Returns:
            list: ``(start, endex)`` address couples, in region order.
        """

        return [(region.address(), region.address() + len(region))
                for region in self.regions]

    def to_memory(self) -> Memory:
        r"""Exports into a sparse memory object.

        Each region is written at its address; regions overlapping after
        careless moves overwrite each other, in region order.

        Returns:
            :class:`bytesparse.Memory`: Sparse memory.

        Examples:
            >>> image = IhexImage.parse(b':01001000559A\n:00000001FF\n')
            >>> image.to_memory().to_blocks()
            [[16, b'U']]
        """

        memory = Memory()
        for region in self.regions:
            memory.write(region.address(), region.data)
        return memory

    def total_size(self) -> int:

        return sum(len(region) for region in self.regions)
