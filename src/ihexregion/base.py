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

r"""Common types, errors and helpers."""

from typing import Any
from typing import Mapping
from typing import Optional
from typing import Union

import colorama

try:
    from typing import TypeAlias
except ImportError:  # pragma: no cover
    TypeAlias = Any  # Python < 3.10

AnyBytes: TypeAlias = Union[bytes, bytearray, memoryview]
AnyLine: TypeAlias = Union[bytes, bytearray, memoryview, str]

TOKEN_COLOR_CODES: Mapping[str, bytes] = {
    '':         colorama.Style.RESET_ALL.encode(),
    '<':        colorama.Style.RESET_ALL.encode(),
    '>':        colorama.Style.RESET_ALL.encode(),
    'begin':    colorama.Fore.YELLOW.encode(),
    'checksum': colorama.Fore.MAGENTA.encode(),
    'count':    colorama.Fore.BLUE.encode(),
    'data':     colorama.Fore.CYAN.encode(),
    'dataalt':  colorama.Fore.LIGHTCYAN_EX.encode(),
    'end':      colorama.Style.RESET_ALL.encode(),
    'offset':   colorama.Fore.RED.encode(),
    'tag':      colorama.Fore.GREEN.encode(),
}
r"""ANSI color codes for each possible token type."""


def colorize_tokens(
    tokens: Mapping[str, bytes],
    altdata: bool = True,
) -> Mapping[str, bytes]:
    r"""Prepends ANSI color codes to record field tokens.

    For each token within `tokens`, its key is used to look up the ANSI color
    code from :data:`TOKEN_COLOR_CODES`.
    The retrieved code (byte string) is prepended to the token.
    Empty tokens are dropped.

    Args:
        tokens (dict):
            A mapping of each token key name to token byte string.

        altdata (bool):
            If true, it alternates each byte (two hex digits) between the ANSI
            color codes mapped with keys ``data`` (even byte index) and
            ``dataalt`` (odd byte index).
            If false, only the ``data`` code is prepended.

    Returns:
        dict: `tokens` with prepended ANSI color codes.

    Examples:
        >>> from ihexregion.base import colorize_tokens
        >>> from ihexregion.record import IhexRecord
        >>> tokens = IhexRecord.create_end_of_file().to_tokens()
        >>> colorized = colorize_tokens(tokens)
        >>> colorized['tag']
        b'\x1b[32m01'
        >>> 'data' in colorized
        False
    """

    codes = TOKEN_COLOR_CODES
    colorized = {}
    colorized.setdefault('<', codes['<'])

    for key, value in tokens.items():
        if key not in codes:
            key = ''
        if value:
            code = codes[key]

            if key == 'data' and altdata:
                altcode = codes['dataalt']
                buffer = bytearray()
                length = len(value)
                i = 0

                for i in range(0, length - 1, 2):
                    buffer.extend(altcode if i & 2 else code)
                    buffer.append(value[i])
                    buffer.append(value[i + 1])

                if length & 1:
                    buffer.extend(code if i & 2 else altcode)
                    buffer.append(value[length - 1])

                colorized[key] = bytes(buffer)
            else:
                colorized[key] = code + value

    colorized.setdefault('>', codes['>'])
    return colorized


class IhexError(ValueError):
    r"""Intel HEX processing error.

    Base class of all the errors raised while decoding records or assembling
    regions.
    It is a :class:`ValueError`, so that generic callers can handle it as
    any other invalid value.
    """


class ChecksumError(IhexError):
    r"""Record checksum mismatch.

    Attributes:
        transmitted (int):
            Checksum byte found within the record text.

        computed (int):
            Checksum byte computed over the record fields.

        line (int):
            1-based line number of the failing record, if known.
    """

    def __init__(
        self,
        transmitted: int,
        computed: int,
        line: Optional[int] = None,
    ):

        self.transmitted: int = transmitted
        self.computed: int = computed
        self.line: Optional[int] = line
        super().__init__(transmitted, computed, line)

    def __str__(self) -> str:

        text = f'record checksum error: 0x{self.transmitted:02x} != 0x{self.computed:02x}'
        if self.line is not None:
            text = f'{text} on line {self.line}'
        return text

    def at_line(self, line: int) -> 'ChecksumError':
        r"""Copy of this error, located at some line number."""

        return type(self)(self.transmitted, self.computed, line=line)


class UnknownRecordTypeError(IhexError):
    r"""Unknown record type code.

    Attributes:
        code (int):
            Record type code, not defined by the format.

        line (int):
            1-based line number of the failing record, if known.
    """

    def __init__(self, code: int, line: Optional[int] = None):

        self.code: int = code
        self.line: Optional[int] = line
        super().__init__(code, line)

    def __str__(self) -> str:

        text = f'unknown record type: 0x{self.code:02X}'
        if self.line is not None:
            text = f'{text} on line {self.line}'
        return text

    def at_line(self, line: int) -> 'UnknownRecordTypeError':

        return type(self)(self.code, line=line)


class UnimplementedRecordTypeError(IhexError, NotImplementedError):
    r"""Record type defined by the format, but not supported.

    Raised for *Extended Segment Address*, *Start Segment Address* and
    *Start Linear Address* records.

    Attributes:
        code (int):
            Record type code.

        line (int):
            1-based line number of the failing record, if known.
    """

    def __init__(self, code: int, line: Optional[int] = None):

        self.code: int = code
        self.line: Optional[int] = line
        super().__init__(code, line)

    def at_line(self, line: int) -> 'UnimplementedRecordTypeError':

        return type(self)(self.code, line=line)

    def __str__(self) -> str:

        text = f'record type not implemented: 0x{self.code:02X}'
        if self.line is not None:
            text = f'{text} on line {self.line}'
        return text


class NonContiguousError(IhexError):
    r"""Region data is not contiguous.

    Attributes:
        offset (int):
            Offset of the rejected byte.

        expected (int):
            The only offset the region could accept, or ``None`` if the byte
            falls beyond the end of the 64 KiB segment.
    """

    def __init__(self, offset: int, expected: Optional[int] = None):

        self.offset: int = offset
        self.expected: Optional[int] = expected
        super().__init__(offset, expected)

    def __str__(self) -> str:

        if self.expected is None:
            return (f'region does not contain continuous data: '
                    f'offset 0x{self.offset:04X} beyond segment end')
        return (f'region does not contain continuous data: '
                f'offset 0x{self.offset:04X}, expected 0x{self.expected:04X}')
