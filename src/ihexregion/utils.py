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

r"""Generic utility functions."""

import binascii
import re
from typing import Any
from typing import Iterator
from typing import Optional
from typing import Tuple
from typing import Union

from .base import AnyBytes

ADDRESS_REGEX = re.compile(r'^\s*(0x)?(?P<value>[0-9a-f]+)h?\s*$')

ADDRESS_PAIR_REGEX = re.compile(r'^\s*(?P<source>[^-\s]+)\s*-\s*(?P<target>[^-\s]+)\s*$')

HEX_NIBBLES: bytes = bytes(
    (int(chr(c), 16) if chr(c) in '0123456789ABCDEFabcdef' else 0)
    for c in range(256)
)
r"""Translation table from ASCII hexadecimal digit to nibble value.

Any character other than a hexadecimal digit maps to zero.
"""

WHITESPACE: bytes = b' \t\v\f\r\n'
r"""Whitespace byte values, skipped while reading record fields."""


def chop(
    vector: AnyBytes,
    window: int,
) -> Iterator[AnyBytes]:
    r"""Chops a vector.

    Iterates through the vector grouping its items into windows.

    Args:
        vector (items):
            Vector to chop.

        window (int):
            Window length.

    Yields:
        list or items: `vector` slices of up to `window` elements.

    Examples:
        >>> list(chop(b'ABCDEFG', 2))
        [b'AB', b'CD', b'EF', b'G']

        >>> b':'.join(chop(b'ABCDEFG', 2))
        b'AB:CD:EF:G'
    """
    window = int(window)
    if window <= 0:
        raise ValueError('non-positive window')

    for i in range(0, len(vector), window):
        yield vector[i:(i + window)]


def hexlify(
    bytestr: AnyBytes,
    sep: Optional[Union[bytes, bytearray]] = None,
    upper: bool = True,
) -> bytes:
    r"""Converts raw bytes into a hexadecimal byte string.

    Args:
        bytestr (bytes):
            Source byte string.

        sep (bytes):
            Optional byte separator.

        upper (bool):
            Uppercase hexadecimal string.

    Returns:
        bytes: Hexadecimal byte string.

    Examples:
        >>> from ihexregion.utils import hexlify
        >>> hexlify(b'\xAA\xBB\xCC')
        b'AABBCC'
        >>> hexlify(b'\xAA\xBB\xCC', sep=b' ')
        b'AA BB CC'
        >>> hexlify(b'\xAA\xBB\xCC', upper=False)
        b'aabbcc'
    """

    if sep:
        hexstr = binascii.hexlify(bytestr, sep)
    else:
        hexstr = binascii.hexlify(bytestr)

    if upper:
        hexstr = hexstr.upper()

    return hexstr


def unhexlify(hexstr: AnyBytes) -> bytes:
    r"""Converts a hexadecimal byte string into raw bytes, leniently.

    Each pair of characters makes a byte, high nibble first.
    Unlike :func:`binascii.unhexlify`, it never fails: any character which is
    not a hexadecimal digit evaluates as ``0``, and a missing low nibble of
    the last pair evaluates as ``0`` too.

    Args:
        hexstr (bytes):
            Source hexadecimal byte string.

    Returns:
        bytes: Raw byte string.

    Examples:
        >>> from ihexregion.utils import unhexlify
        >>> unhexlify(b'AABBcc')
        b'\xaa\xbb\xcc'
        >>> unhexlify(b'A?1')
        b'\xa0\x10'
    """

    nibbles = bytes(hexstr).translate(HEX_NIBBLES)
    if len(nibbles) & 1:
        nibbles += b'\0'

    bytestr = bytes((nibbles[i] << 4) | nibbles[i + 1]
                    for i in range(0, len(nibbles), 2))
    return bytestr


def parse_address(
    value: Union[str, Any],
) -> int:
    r"""Parses a 32-bit address.

    Args:
        value:
            In case `value` is a :obj:`str` (case-insensitive), it is always
            read as hexadecimal, either plain or prefixed with ``0x`` or
            postfixed with ``h``.
            Any other object class will call the standard :func:`int`.

    Returns:
        int: Address value.

    Raises:
        ValueError: Invalid syntax, or address out of the 32-bit range.

    Examples:
        >>> parse_address('8000')
        32768
        >>> parse_address('0x00010000')
        65536
        >>> parse_address('FFh')
        255
    """

    if isinstance(value, str):
        m = ADDRESS_REGEX.match(value.lower())
        if not m:
            raise ValueError(f'invalid syntax: {value!r}')
        address = int(m.group('value'), 16)
    else:
        address = int(value)

    if not 0 <= address <= 0xFFFFFFFF:
        raise ValueError(f'address overflow: {value!r}')
    return address


def parse_address_pair(value: str) -> Tuple[int, int]:
    r"""Parses a ``source-target`` address pair.

    Both addresses are parsed via :func:`parse_address`.

    Examples:
        >>> parse_address_pair('10000-20000')
        (65536, 131072)
        >>> parse_address_pair('0x100 - 0x200')
        (256, 512)
    """

    m = ADDRESS_PAIR_REGEX.match(value)
    if not m:
        raise ValueError(f'invalid syntax: {value!r}')

    source = parse_address(m.group('source'))
    target = parse_address(m.group('target'))
    return source, target
