import copy
import pickle

import pytest

import ihexregion.base as _ir
from ihexregion.base import ChecksumError
from ihexregion.base import IhexError
from ihexregion.base import NonContiguousError
from ihexregion.base import UnimplementedRecordTypeError
from ihexregion.base import UnknownRecordTypeError
from ihexregion.base import colorize_tokens


@pytest.fixture
def fake_token_color_codes(request):
    backup = _ir.TOKEN_COLOR_CODES
    _ir.TOKEN_COLOR_CODES = {key: (b'[%s]' % key.encode()) for key in backup}
    yield
    _ir.TOKEN_COLOR_CODES = backup


def test_colorize_tokens_altdata(fake_token_color_codes):

    tokens = {
        'begin':    b':',
        'count':    b'03',
        'offset':   b'1234',
        'tag':      b'00',
        'data':     b'616263',
        'checksum': b'91',
        'end':      b'\n',
        'unknown':  b'?',
    }
    ans_out = colorize_tokens(tokens, altdata=True)
    ans_ref = {
        '<':        b'[<]',
        'begin':    b'[begin]:',
        'count':    b'[count]03',
        'offset':   b'[offset]1234',
        'tag':      b'[tag]00',
        'data':     b'[data]61[dataalt]62[data]63',
        'checksum': b'[checksum]91',
        'end':      b'[end]\n',
        '':         b'[]?',
        '>':        b'[>]',
    }
    assert ans_out == ans_ref


def test_colorize_tokens_plain(fake_token_color_codes):

    tokens = {
        'data':     b'616263',
        'checksum': b'',
    }
    ans_out = colorize_tokens(tokens, altdata=False)
    ans_ref = {
        '<':        b'[<]',
        'data':     b'[data]616263',
        '>':        b'[>]',
    }
    assert ans_out == ans_ref


def test_colorize_tokens_odd_data(fake_token_color_codes):

    ans_out = colorize_tokens({'data': b'61626'})
    assert ans_out['data'] == b'[data]61[dataalt]62[data]6'


class TestChecksumError:

    def test___init__(self):
        e = ChecksumError(0x12, 0x34)
        assert e.transmitted == 0x12
        assert e.computed == 0x34
        assert e.line is None
        assert str(e) == 'record checksum error: 0x12 != 0x34'

    def test_at_line(self):
        e = ChecksumError(0x12, 0x34).at_line(7)
        assert isinstance(e, ChecksumError)
        assert e.transmitted == 0x12
        assert e.computed == 0x34
        assert e.line == 7
        assert str(e) == 'record checksum error: 0x12 != 0x34 on line 7'

    def test_hierarchy(self):
        e = ChecksumError(0, 1)
        assert isinstance(e, IhexError)
        assert isinstance(e, ValueError)


class TestUnknownRecordTypeError:

    def test___init__(self):
        e = UnknownRecordTypeError(0x42)
        assert e.code == 0x42
        assert e.line is None
        assert str(e) == 'unknown record type: 0x42'

    def test_at_line(self):
        e = UnknownRecordTypeError(0x42).at_line(3)
        assert e.code == 0x42
        assert e.line == 3
        assert str(e) == 'unknown record type: 0x42 on line 3'


class TestUnimplementedRecordTypeError:

    def test___init__(self):
        e = UnimplementedRecordTypeError(0x05)
        assert e.code == 0x05
        assert str(e) == 'record type not implemented: 0x05'

    def test_at_line(self):
        e = UnimplementedRecordTypeError(0x02).at_line(9)
        assert e.line == 9
        assert str(e) == 'record type not implemented: 0x02 on line 9'

    def test_hierarchy(self):
        e = UnimplementedRecordTypeError(0x03)
        assert isinstance(e, IhexError)
        assert isinstance(e, NotImplementedError)
        assert not isinstance(e, UnknownRecordTypeError)


class TestNonContiguousError:

    def test___init__(self):
        e = NonContiguousError(0x0013, 0x0012)
        assert e.offset == 0x0013
        assert e.expected == 0x0012
        assert isinstance(e, IhexError)
        assert str(e) == ('region does not contain continuous data: '
                          'offset 0x0013, expected 0x0012')

    def test___init___segment_end(self):
        e = NonContiguousError(0x10000)
        assert e.offset == 0x10000
        assert e.expected is None
        assert str(e) == ('region does not contain continuous data: '
                          'offset 0x10000 beyond segment end')


@pytest.mark.parametrize('error', [
    ChecksumError(0x12, 0x34, line=5),
    UnknownRecordTypeError(0x42, line=3),
    UnimplementedRecordTypeError(0x02),
    NonContiguousError(0x0013, 0x0012),
    NonContiguousError(0x10000),
])
def test_errors_copy_pickle(error):
    for clone in (copy.copy(error), pickle.loads(pickle.dumps(error))):
        assert type(clone) is type(error)
        assert vars(clone) == vars(error)
        assert str(clone) == str(error)
