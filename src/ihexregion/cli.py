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

"""
Module that contains the command line app.

Why does this file exist, and why not put this in __main__?

  You might be tempted to import things from __main__ later, but that will cause
  problems: the code will get executed twice:

  - When you run `python -m ihexregion` python will execute
    ``__main__.py`` as a script. That means there won't be any
    ``ihexregion.__main__`` in ``sys.modules``.
  - When you import __main__ it will get executed again (as a module) because
    there's no ``ihexregion.__main__`` in ``sys.modules``.

  Also see (1) from https://click.palletsprojects.com/en/stable/setuptools/#setuptools-integration
"""

from typing import IO
from typing import Optional
from typing import Sequence
from typing import Tuple

import click

from .__init__ import __version__
from .image import IhexImage
from .image import MoveResult
from .utils import parse_address
from .utils import parse_address_pair


class AddressParamType(click.ParamType):
    name = 'address'

    def convert(self, value, param, ctx):
        try:
            return parse_address(value)
        except ValueError:
            self.fail(f'invalid address: {value!r}', param, ctx)


class AddressPairParamType(click.ParamType):
    name = 'source-target'

    def convert(self, value, param, ctx):
        if isinstance(value, tuple):
            return value
        try:
            return parse_address_pair(value)
        except ValueError:
            self.fail(f'invalid address pair: {value!r}', param, ctx)


ADDRESS = AddressParamType()
ADDRESS_PAIR = AddressPairParamType()

DUMP_WIDTH = click.IntRange(4, 64, clamp=True)
IHEX_WIDTH = click.IntRange(8, 64, clamp=True)

DUMP_WIDTH_DEFAULT = 16
IHEX_WIDTH_DEFAULT = 32


def print_version(ctx, _, value):

    if not value or ctx.resilient_parsing:
        return

    click.echo(f'ihexregion {__version__!s}')
    ctx.exit()


def erase_regions(image: IhexImage, addresses: Sequence[int]) -> None:

    for address in addresses:
        if not image.erase_region(address):
            click.echo(f'warning: cannot erase region, base address '
                       f'0x{address:08x} not found', err=True)


def move_regions(image: IhexImage, pairs: Sequence[Tuple[int, int]]) -> None:

    for source, target in pairs:
        result = image.move_region(source, target)

        if result is MoveResult.NOT_FOUND:
            click.echo(f'warning: cannot move region, base address '
                       f'0x{source:08x} not found', err=True)

        elif result is MoveResult.OCCUPIED:
            click.echo(f'warning: cannot move region, destination base address '
                       f'0x{target:08x} already exists', err=True)


# ============================================================================

@click.command(context_settings=dict(help_option_names=['-h', '--help']))
@click.option('-i', '--input', 'infile', type=click.File('rb'), default='-', help="""
    Input file name, Intel HEX 8-bit format.
    Set to ``-`` to read from standard input (the default).
""")
@click.option('-o', '--output', 'outfile', type=click.File('wb'), default='-', help="""
    Output file name.
    Set to ``-`` to write to standard output (the default).
""")
@click.option('--info', is_flag=True, help="""
    Shows general information about the regions.
""")
@click.option('--dump', 'dump_width', type=DUMP_WIDTH, is_flag=False,
              flag_value=DUMP_WIDTH_DEFAULT, default=None, help=f"""
    Outputs as hex dump, with optional width of the output [4..64];
    {DUMP_WIDTH_DEFAULT} by default.
""")
@click.option('--ihex', 'ihex_width', type=IHEX_WIDTH, is_flag=False,
              flag_value=IHEX_WIDTH_DEFAULT, default=None, help=f"""
    Outputs as Intel HEX 8-bit file, with optional width of the data records
    [8..64]; {IHEX_WIDTH_DEFAULT} by default.
""")
@click.option('--erase-region', 'erase_addresses', type=ADDRESS, multiple=True, help="""
    Erases the region starting at the specified hexadecimal address.
    This option may be specified multiple times.
""")
@click.option('--move-region', 'move_pairs', type=ADDRESS_PAIR, multiple=True, help="""
    Moves an entire region, as ``SOURCE-TARGET`` hexadecimal addresses.
    The source address must exist, the target address must not be occupied.
    This option may be specified multiple times.
    Overlapping moves are not checked, and result in undefined behaviour.
""")
@click.option('--color', is_flag=True, help="""
    Colorizes the Intel HEX output tokens.
""")
@click.option('-v', '--version', is_flag=True, is_eager=True,
              expose_value=False, callback=print_version, help="""
    Prints the package version number.
""")
def main(
    infile: IO,
    outfile: IO,
    info: bool,
    dump_width: Optional[int],
    ihex_width: Optional[int],
    erase_addresses: Sequence[int],
    move_pairs: Sequence[Tuple[int, int]],
    color: bool,
) -> None:
    """
    Manipulates the regions of an Intel HEX file.

    Regions are the contiguous data blocks found between Extended Linear
    Address records. Erasures apply before moves.
    """

    try:
        image = IhexImage.load(infile)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    erase_regions(image, erase_addresses)
    move_regions(image, move_pairs)

    if info:
        image.info(outfile)
    elif dump_width is not None:
        image.dump_data(outfile, width=dump_width)
    elif ihex_width is not None:
        image.dump_ihex(outfile, width=ihex_width, color=color)
