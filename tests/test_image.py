import io

import pytest
from bytesparse import Memory

from ihexregion.base import ChecksumError
from ihexregion.base import IhexError
from ihexregion.base import NonContiguousError
from ihexregion.base import UnimplementedRecordTypeError
from ihexregion.base import UnknownRecordTypeError
from ihexregion.image import IhexImage
from ihexregion.image import MoveResult
from ihexregion.image import assemble
from ihexregion.image import parse_records
from ihexregion.record import IhexRecord
from ihexregion.region import Region

REGIONS_HEX = (
    b':020000040001F9\n'
    b':0400000000010203F6\n'
    b':0400040004050607E2\n'
    b':020000040002F8\n'
    b':03800000AABBCC4C\n'
    b':00000001FF\n'
)


@pytest.fixture
def image():
    return IhexImage.parse(REGIONS_HEX)


def region_summary(image):
    return [(region.address(), region.data) for region in image]


class TestMoveResult:

    def test___bool__(self):
        assert bool(MoveResult.MOVED) is True
        assert bool(MoveResult.NOT_FOUND) is False
        assert bool(MoveResult.OCCUPIED) is False


def test_parse_records():
    lines = [
        b':020000040001F9\n',
        b'\n',
        b'   \r\n',
        b':00000001FF\n',
    ]
    records = list(parse_records(lines))
    assert len(records) == 2
    assert records[0] == IhexRecord.create_extended_linear_address(0x00010000)
    assert records[0].coords == (1, 0)
    assert records[1] == IhexRecord.create_end_of_file()
    assert records[1].coords == (4, 0)


def test_parse_records_text():
    lines = [':020000040001F9\n', ':00000001FF\n']
    records = list(parse_records(lines))
    assert [record.tag for record in records] == [4, 1]


def test_parse_records_raises_checksum_line():
    lines = [b'\n', b':020000040001F9\n', b':0400000000010203F7\n']
    with pytest.raises(ChecksumError) as info:
        list(parse_records(lines))
    assert info.value.line == 3
    assert info.value.transmitted == 0xF7
    assert info.value.computed == 0xF6
    assert 'on line 3' in str(info.value)


def test_parse_records_raises_unknown_line():
    lines = [b':020000040001F9\n', b':00000006FA\n']
    with pytest.raises(UnknownRecordTypeError) as info:
        list(parse_records(lines))
    assert info.value.line == 2
    assert info.value.code == 0x06


def test_parse_records_raises_unimplemented_line():
    lines = [b':020000021200EA\n']
    with pytest.raises(UnimplementedRecordTypeError) as info:
        list(parse_records(lines))
    assert info.value.line == 1
    assert info.value.code == 0x02


def test_assemble_splits_at_extended_linear_address():
    records = [
        IhexRecord.create_extended_linear_address(0x00010000),
        IhexRecord.create_data(0, b'\xAA'),
        IhexRecord.create_extended_linear_address(0x00020000),
        IhexRecord.create_data(0, b'\xBB'),
        IhexRecord.create_end_of_file(),
    ]
    regions = assemble(records)
    assert len(regions) == 2
    assert regions[0].address() == 0x00010000
    assert regions[0].data == b'\xAA'
    assert regions[1].address() == 0x00020000
    assert regions[1].data == b'\xBB'


def test_assemble_default_base():
    records = [
        IhexRecord.create_data(0x1000, b'abc'),
        IhexRecord.create_data(0x1003, b'def'),
        IhexRecord.create_end_of_file(),
    ]
    regions = assemble(records)
    assert len(regions) == 1
    assert regions[0].base_address == 0
    assert regions[0].offset == 0x1000
    assert regions[0].data == b'abcdef'


def test_assemble_discards_empty_regions():
    records = [
        IhexRecord.create_extended_linear_address(0x00010000),
        IhexRecord.create_extended_linear_address(0x00020000),
        IhexRecord.create_data(0, b'abc'),
        IhexRecord.create_extended_linear_address(0x00030000),
        IhexRecord.create_end_of_file(),
    ]
    regions = assemble(records)
    assert len(regions) == 1
    assert regions[0].address() == 0x00020000


def test_assemble_stops_at_end_of_file():
    records = [
        IhexRecord.create_data(0, b'abc'),
        IhexRecord.create_end_of_file(),
        IhexRecord.create_extended_linear_address(0x00010000),
        IhexRecord.create_data(0, b'xyz'),
    ]
    regions = assemble(records)
    assert len(regions) == 1
    assert regions[0].data == b'abc'


def test_assemble_without_end_of_file():
    records = [
        IhexRecord.create_extended_linear_address(0x00010000),
        IhexRecord.create_data(0, b'abc'),
    ]
    regions = assemble(records)
    assert len(regions) == 1
    assert regions[0].address() == 0x00010000


def test_assemble_empty():
    assert assemble([]) == []
    assert assemble([IhexRecord.create_end_of_file()]) == []


def test_assemble_raises_gap():
    records = [
        IhexRecord.create_data(0, b'abc'),
        IhexRecord.create_data(4, b'def'),
    ]
    with pytest.raises(NonContiguousError) as info:
        assemble(records)
    assert info.value.offset == 4
    assert info.value.expected == 3


def test_assemble_raises_backward():
    records = [
        IhexRecord.create_data(0x10, b'abc'),
        IhexRecord.create_data(0x00, b'def'),
    ]
    with pytest.raises(NonContiguousError):
        assemble(records)


def test_assemble_raises_past_segment_end():
    buffer = (
        b':02FFFF000102FD\n'
        b':00000001FF\n'
    )
    with pytest.raises(NonContiguousError) as info:
        IhexImage.parse(buffer)
    assert isinstance(info.value, IhexError)
    assert info.value.offset == 0x10000
    assert info.value.expected is None


class TestIhexImage:

    def test___init__(self):
        image = IhexImage()
        assert image.regions == []
        assert len(image) == 0

        regions = [Region(0x00010000)]
        image = IhexImage(regions)
        assert image.regions == regions
        assert image.regions is not regions

    def test___getitem__(self, image):
        assert image[0].address() == 0x00010000
        assert image[-1].address() == 0x00028000

    def test___iter__(self, image):
        assert [region.address() for region in image] == [0x00010000, 0x00028000]

    def test_parse(self, image):
        assert region_summary(image) == [
            (0x00010000, bytes(range(8))),
            (0x00028000, b'\xAA\xBB\xCC'),
        ]

    def test_parse_example(self):
        buffer = (b':10000000112233445566778899AABBCCDDEEFF00F8\n'
                  b':00000001FF\n')
        image = IhexImage.parse(buffer)
        assert len(image) == 1
        assert image[0].address() == 0
        assert len(image[0]) == 16
        assert image[0].data == bytes.fromhex('112233445566778899AABBCCDDEEFF00')

    def test_parse_str(self):
        image = IhexImage.parse(REGIONS_HEX.decode())
        assert len(image) == 2

    def test_parse_crlf(self):
        image = IhexImage.parse(REGIONS_HEX.replace(b'\n', b'\r\n'))
        assert len(image) == 2

    def test_parse_ignores_after_end_of_file(self):
        buffer = REGIONS_HEX + b':0400000000010203F7\n'
        image = IhexImage.parse(buffer)
        assert len(image) == 2

    def test_parse_raises_checksum(self):
        buffer = REGIONS_HEX.replace(b'E2', b'E3')
        with pytest.raises(ChecksumError) as info:
            IhexImage.parse(buffer)
        assert info.value.line == 3

    def test_parse_raises_non_contiguous(self):
        buffer = (b':0100000055AA\n'
                  b':0100020055A8\n'
                  b':00000001FF\n')
        with pytest.raises(NonContiguousError):
            IhexImage.parse(buffer)

    def test_load(self):
        stream = io.BytesIO(REGIONS_HEX)
        image = IhexImage.load(stream)
        assert len(image) == 2

    def test_load_text(self):
        stream = io.StringIO(REGIONS_HEX.decode())
        image = IhexImage.load(stream)
        assert len(image) == 2

    def test_dump_data(self, image):
        stream = io.BytesIO()
        assert image.dump_data(stream, width=4) is image
        ans_ref = (b'0x00010000 : 00 01 02 03\n'
                   b'0x00010004 : 04 05 06 07\n'
                   b'0x00028000 : aa bb cc\n')
        assert stream.getvalue() == ans_ref

    def test_dump_ihex(self, image):
        stream = io.BytesIO()
        assert image.dump_ihex(stream) is image
        ans_ref = (b':020000040001F9\n'
                   b':080000000001020304050607DC\n'
                   b':020000040002F8\n'
                   b':03800000AABBCC4C\n'
                   b':00000001FF\n')
        assert stream.getvalue() == ans_ref

    def test_dump_ihex_roundtrip(self, image):
        stream = io.BytesIO()
        image.dump_ihex(stream, width=3)
        other = IhexImage.parse(stream.getvalue())
        assert region_summary(other) == region_summary(image)

    def test_dump_ihex_empty(self):
        stream = io.BytesIO()
        IhexImage().dump_ihex(stream)
        assert stream.getvalue() == b':00000001FF\n'

    def test_erase_region(self, image):
        assert image.erase_region(0x00010000) is True
        assert region_summary(image) == [(0x00028000, b'\xAA\xBB\xCC')]

    def test_erase_region_not_found(self, image):
        before = region_summary(image)
        assert image.erase_region(0x00010001) is False
        assert image.erase_region(0x00020000) is False
        assert region_summary(image) == before

    def test_find(self, image):
        assert image.find(0x00028000) is image[1]
        assert image.find(0x00028001) is None

    def test_index(self, image):
        assert image.index(0x00010000) == 0
        assert image.index(0x00028000) == 1
        assert image.index(0) is None

    def test_info(self, image):
        stream = io.BytesIO()
        assert image.info(stream) is image
        ans_ref = (b'0x00010000-0x00010007 0x0008\n'
                   b'0x00028000-0x00028002 0x0003\n'
                   b'\n'
                   b'total size: 11 bytes\n')
        assert stream.getvalue() == ans_ref

    def test_info_empty(self):
        stream = io.BytesIO()
        IhexImage().info(stream)
        assert stream.getvalue() == b'\ntotal size: 0 bytes\n'

    def test_move_region(self, image):
        result = image.move_region(0x00028000, 0x12345678)
        assert result is MoveResult.MOVED
        region = image[1]
        assert region.base_address == 0x12340000
        assert region.offset == 0x5678
        assert region.data == b'\xAA\xBB\xCC'
        assert image.find(0x12345678) is region
        assert image.find(0x00028000) is None
        assert image[0].address() == 0x00010000

    def test_move_region_not_found(self, image):
        before = region_summary(image)
        assert image.move_region(0x00030000, 0x00040000) is MoveResult.NOT_FOUND
        assert region_summary(image) == before

    def test_move_region_occupied(self, image):
        before = region_summary(image)
        assert image.move_region(0x00010000, 0x00028000) is MoveResult.OCCUPIED
        assert region_summary(image) == before

    def test_move_region_overlap_unchecked(self, image):
        result = image.move_region(0x00028000, 0x00010004)
        assert result is MoveResult.MOVED
        assert image.spans() == [(0x00010000, 0x00010008), (0x00010004, 0x00010007)]

    def test_move_region_same_address(self, image):
        assert image.move_region(0x00010000, 0x00010000) is MoveResult.OCCUPIED

    def test_move_then_erase(self, image):
        assert image.move_region(0x00010000, 0x00050000)
        assert image.erase_region(0x00010000) is False
        assert image.erase_region(0x00050000) is True
        assert len(image) == 1

    def test_spans(self, image):
        assert image.spans() == [(0x00010000, 0x00010008), (0x00028000, 0x00028003)]

    def test_to_memory(self, image):
        memory = image.to_memory()
        assert isinstance(memory, Memory)
        assert memory.to_blocks() == [
            [0x00010000, bytes(range(8))],
            [0x00028000, b'\xAA\xBB\xCC'],
        ]

    def test_total_size(self, image):
        assert image.total_size() == 11
        assert IhexImage().total_size() == 0
