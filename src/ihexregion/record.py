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

r"""Intel HEX record codec.

See Also:
    `<https://en.wikipedia.org/wiki/Intel_HEX>`_
"""

import enum
import sys
from typing import IO
from typing import Any
from typing import Mapping
from typing import MutableMapping
from typing import Optional
from typing import Sequence
from typing import Tuple
from typing import Type

from .base import AnyBytes
from .base import AnyLine
from .base import ChecksumError
from .base import UnimplementedRecordTypeError
from .base import UnknownRecordTypeError
from .base import colorize_tokens
from .utils import WHITESPACE
from .utils import hexlify
from .utils import unhexlify


class IhexTag(enum.IntEnum):
    r"""Intel HEX record tag."""

    DATA = 0
    r"""Binary data."""

    END_OF_FILE = 1
    r"""End Of File."""

    EXTENDED_SEGMENT_ADDRESS = 2
    r"""Extended Segment Address."""

    START_SEGMENT_ADDRESS = 3
    r"""Start Segment Address."""

    EXTENDED_LINEAR_ADDRESS = 4
    r"""Extended Linear Address."""

    START_LINEAR_ADDRESS = 5
    r"""Start Linear Address."""

    def is_data(self) -> bool:

        return self == self.DATA

    def is_eof(self) -> bool:
        r"""Tells whether this is an End Of File record tag.

        Examples:
            >>> IhexTag.END_OF_FILE.is_eof()
            True
            >>> IhexTag.DATA.is_eof()
            False
        """

        return self == self.END_OF_FILE

    def is_extension(self) -> bool:
        r"""Tells whether this is an Extended Linear Address record tag.

        Only linear address extension is supported; segment extension is
        reported by :meth:`is_implemented` instead.

        Examples:
            >>> IhexTag.EXTENDED_LINEAR_ADDRESS.is_extension()
            True
            >>> IhexTag.DATA.is_extension()
            False
        """

        return self == self.EXTENDED_LINEAR_ADDRESS

    def is_implemented(self) -> bool:
        r"""Tells whether records of this tag can be processed.

        Examples:
            >>> IhexTag.DATA.is_implemented()
            True
            >>> IhexTag.START_LINEAR_ADDRESS.is_implemented()
            False
        """

        return self in _IMPLEMENTED_TAGS


_IMPLEMENTED_TAGS = frozenset([
    IhexTag.DATA,
    IhexTag.END_OF_FILE,
    IhexTag.EXTENDED_LINEAR_ADDRESS,
])


class IhexRecord:
    r"""Intel HEX record object.

    A record is a single line of an Intel HEX file::

        :LLOOOOTT[DD...]CC

    where ``LL`` is the data byte count, ``OOOO`` the 16-bit offset,
    ``TT`` the record tag, ``DD`` the data bytes and ``CC`` the checksum,
    all of them as pairs of hexadecimal digits.

    Records are not meant to be modified after creation; factory methods
    create records of each supported *nature*.

    Attributes:
        tag (:class:`IhexTag`):
            The *tag*, indicating the *nature* of the record.

        offset (int):
            16-bit offset of the first *data* byte; zero for other records.

        data (bytes):
            Record payload, up to 255 bytes.

        checksum (int):
            Checksum byte, either transmitted or computed.

        coords (int couple):
            Coordinates of the parsed record (line number, column);
            useful for diagnostics only.

    Args:
        tag (:class:`IhexTag`):
            See :attr:`tag` attribute.

        offset (int):
            See :attr:`offset` attribute.

        data (bytes):
            See :attr:`data` attribute.

        checksum (int):
            See :attr:`checksum` attribute.
            ``Ellipsis`` initializes :attr:`checksum` via
            :meth:`compute_checksum`.

        coords (int couple):
            See :attr:`coords` attribute.
    """

    EQUALITY_KEYS: Sequence[str] = [
        'checksum',
        'data',
        'offset',
        'tag',
    ]
    r"""Meta keys for equality checks."""

    META_KEYS: Sequence[str] = [
        'checksum',
        'coords',
        'data',
        'offset',
        'tag',
    ]
    r"""Meta keys."""

    Tag: Type[IhexTag] = IhexTag

    def __bytes__(self) -> bytes:

        return self.to_bytestr()

    def __eq__(self, other: Any) -> bool:

        return not self != other

    def __init__(
        self,
        tag: IhexTag,
        offset: int = 0,
        data: AnyBytes = b'',
        checksum: Any = Ellipsis,
        coords: Tuple[int, int] = (-1, -1),
    ):

        offset = offset.__index__()
        if not 0 <= offset <= 0xFFFF:
            raise ValueError('offset overflow')

        data = bytes(data)
        if len(data) > 0xFF:
            raise ValueError('data size overflow')

        self.tag: IhexTag = self.Tag(tag)
        self.offset: int = offset
        self.data: bytes = data
        self.coords: Tuple[int, int] = coords

        if checksum is Ellipsis:
            checksum = self.compute_checksum()
        else:
            checksum = checksum.__index__()
            if not 0 <= checksum <= 0xFF:
                raise ValueError('checksum overflow')
        self.checksum: int = checksum

    def __ne__(self, other: Any) -> bool:

        for key in self.EQUALITY_KEYS:
            if not hasattr(other, key):
                return True
            if getattr(self, key) != getattr(other, key):
                return True

        return False

    def __repr__(self) -> str:

        meta = self.get_meta()
        text = f'<{self.__class__!s} @0x{id(self):08X} '
        text += ' '.join(f'{key!s}:={value!r}' for key, value in meta.items())
        text += '>'
        return text

    def __str__(self) -> str:

        return self.to_bytestr().decode()

    def address(self) -> int:
        r"""Extended linear address.

        It re-assembles the upper 16 bits of a 32-bit address, as carried by
        the first two bytes of :attr:`data`.
        Zero if :attr:`data` holds less than two bytes.

        Returns:
            int: 32-bit address, with the lower 16 bits cleared.

        Examples:
            >>> record = IhexRecord.create_extended_linear_address(0x12345678)
            >>> hex(record.address())
            '0x12340000'
        """

        data = self.data
        if len(data) < 2:
            return 0
        return (data[0] << 24) | (data[1] << 16)

    def compute_checksum(self) -> int:
        r"""Computes the checksum field value.

        It is the two's complement of the byte sum of count, offset (both
        bytes), tag and data.

        Returns:
            int: Computed checksum byte.

        Examples:
            >>> IhexRecord.create_end_of_file().compute_checksum()
            255
        """

        count = len(self.data) & 0xFF
        offset = self.offset & 0xFFFF
        sum_offset = (offset >> 8) + (offset & 0xFF)
        sum_data = sum(iter(self.data))
        tag = int(self.tag) & 0xFF
        checksum = (count + sum_offset + tag + sum_data)
        checksum = (0x100 - (checksum & 0xFF)) & 0xFF
        return checksum

    def compute_count(self) -> int:

        return len(self.data)

    @classmethod
    def create_data(
        cls,
        address: int,
        data: AnyBytes = b'',
    ) -> 'IhexRecord':
        r"""Creates a Data record.

        Args:
            address (int):
                Address of the first byte; only its lower 16 bits are kept as
                the record offset.

            data (bytes):
                Record payload.

        Returns:
            :class:`IhexRecord`: Data record object.

        Examples:
            >>> str(IhexRecord.create_data(0x12345678, b'abc'))
            ':0356780061626309\n'
        """

        record = cls(cls.Tag.DATA, offset=(address.__index__() & 0xFFFF), data=data)
        return record

    @classmethod
    def create_end_of_file(cls) -> 'IhexRecord':
        r"""Creates an End Of File record.

        Examples:
            >>> str(IhexRecord.create_end_of_file())
            ':00000001FF\n'
        """

        record = cls(cls.Tag.END_OF_FILE)
        return record

    @classmethod
    def create_extended_linear_address(cls, address: int) -> 'IhexRecord':
        r"""Creates an Extended Linear Address record.

        Args:
            address (int):
                32-bit address; only its upper 16 bits are carried,
                big-endian.

        Returns:
            :class:`IhexRecord`: Extended Linear Address record object.

        Examples:
            >>> str(IhexRecord.create_extended_linear_address(0x12340000))
            ':020000041234B4\n'
        """

        address = address.__index__()
        if not 0 <= address <= 0xFFFFFFFF:
            raise ValueError('address overflow')

        data = ((address >> 16) & 0xFFFF).to_bytes(2, byteorder='big')
        record = cls(cls.Tag.EXTENDED_LINEAR_ADDRESS, data=data)
        return record

    def get_meta(self) -> MutableMapping[str, Any]:

        meta = {key: getattr(self, key) for key in self.META_KEYS}
        return meta

    @classmethod
    def parse(cls, line: AnyLine) -> 'IhexRecord':
        r"""Decodes a record from a line of text.

        Whitespace is skipped, and the first remaining character is taken as
        the start marker (``:``).
        Then the count, offset, tag, data and checksum fields are read in
        order, two hexadecimal digits per byte.
        Any character which is not a hexadecimal digit evaluates as ``0``,
        as do missing trailing digits.
        Anything after the checksum is ignored.

        Args:
            line (bytes or str):
                Line to decode.

        Returns:
            :class:`IhexRecord`: Decoded record, with verified checksum.

        Raises:
            :class:`UnimplementedRecordTypeError`: Segment addressing or start
                address record.

            :class:`UnknownRecordTypeError`: Unknown record type code.

            :class:`ChecksumError`: Transmitted checksum does not match the
                computed one.

        Examples:
            >>> record = IhexRecord.parse(':0300300002337A1E')
            >>> record.tag, record.offset, record.data
            (<IhexTag.DATA: 0>, 48, b'\x023z')
            >>> IhexRecord.parse(':0300300002337A1F')
            Traceback (most recent call last):
                ...
            ihexregion.base.ChecksumError: record checksum error: 0x1f != 0x1e
        """

        if isinstance(line, str):
            line = line.encode('ascii', 'replace')

        body = bytes(line).translate(None, WHITESPACE)[1:]
        header = unhexlify(body[:8].ljust(8, b'0'))
        count = header[0]
        offset = (header[1] << 8) | header[2]
        code = header[3]

        try:
            tag = cls.Tag(code)
        except ValueError:
            raise UnknownRecordTypeError(code) from None
        if not tag.is_implemented():
            raise UnimplementedRecordTypeError(code)

        size = 8 + (count * 2) + 2
        trailer = unhexlify(body[8:size].ljust(size - 8, b'0'))
        data = trailer[:count]
        checksum = trailer[count]

        record = cls(tag, offset=offset, data=data, checksum=checksum)
        computed = record.compute_checksum()
        if checksum != computed:
            raise ChecksumError(checksum, computed)
        return record

    def print(
        self,
        stream: Optional[IO] = None,
        color: bool = False,
        end: AnyBytes = b'\n',
    ) -> 'IhexRecord':
        r"""Prints a record.

        The record is converted into tokens (eventually colorized) then joined
        and written onto a byte stream (*stdout* by default).

        Args:
            stream (bytes IO):
                The byte stream where the record tokens are printed.
                If ``None``, *stdout* is selected.

            color (bool):
                Tokens are colorized before printing.

            end (bytes):
                Line termination.

        Returns:
            :class:`IhexRecord`: *self*.
        """

        if stream is None:
            stream = sys.stdout.buffer
        tokens = self.to_tokens(end=end)
        if color:
            tokens = colorize_tokens(tokens)
        stream.writelines(tokens.values())
        return self

    def serialize(self, stream: IO, end: AnyBytes = b'\n') -> 'IhexRecord':

        stream.write(self.to_bytestr(end=end))
        return self

    def to_bytestr(self, end: AnyBytes = b'\n') -> bytes:
        r"""Encodes the record into a line of text.

        The checksum is always computed from the record fields, regardless of
        the stored :attr:`checksum` value.

        Args:
            end (bytes):
                Line termination.

        Returns:
            bytes: Encoded line.

        Examples:
            >>> IhexRecord.create_data(0x0030, b'\x02\x33\x7A').to_bytestr()
            b':0300300002337A1E\n'
        """

        bytestr = b':%02X%04X%02X%s%02X%s' % (
            len(self.data) & 0xFF,
            self.offset & 0xFFFF,
            int(self.tag) & 0xFF,
            hexlify(self.data),
            self.compute_checksum(),
            end,
        )
        return bytestr

    def to_tokens(self, end: AnyBytes = b'\n') -> Mapping[str, bytes]:

        return {
            'begin': b':',
            'count': b'%02X' % (len(self.data) & 0xFF),
            'offset': b'%04X' % (self.offset & 0xFFFF),
            'tag': b'%02X' % (int(self.tag) & 0xFF),
            'data': hexlify(self.data),
            'checksum': b'%02X' % self.compute_checksum(),
            'end': bytes(end),
        }
