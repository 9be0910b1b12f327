import inspect
import struct
import sys

import pytest

from mtef2latex.ban_ghi import (
    Character, ColorChange, Embellishment, FutureRecord, Line, Matrix, Pile,
    SizeChange, SizeMarker, StyleOverride, TabStop, Template,
)
from mtef2latex.bo_giai_ma import RecordDecoder
from mtef2latex.cay_cong_thuc import decode_mtef
from mtef2latex.con_tro import ByteCursor
from mtef2latex.config import MAX_NESTING_LIMIT, DecoderConfig, RecordType, Typesize
from mtef2latex.giai_ma import Dimension, Nudge
from mtef2latex.loi import (
    MalformedBufferError, NestingOverflowError, UnhandledTagError, UnsupportedRecordError,
)

from tests.mtef_bytes import HEADER, NULL_LINE, char, chars, line, mtef, tmpl

EXTENDED = DecoderConfig(extended_records=True)


def _no_lists(cursor, depth, owner_tag):
    raise AssertionError('record lá không được đọc object list')


def decode_leaf(data, config=None):
    # Giải một record không có object list con; trả về (record, số byte đã đọc sau tag)
    cursor = ByteCursor(data)
    tag = cursor.read_u8()
    record = RecordDecoder(config or DecoderConfig(), _no_lists).decode(tag, cursor)
    return record, cursor.pos - 1


def test_char_with_mtcode():
    record, used = decode_leaf(bytes([0x02, 0x00, 0x83, 0x78, 0x00]))
    assert record == Character(typeface=3, mtcode=0x78, options=record.options)
    assert record.typeface_name == 'variable'
    assert record.nudge is None
    assert used == 4


def test_char_nudge_advances_exactly_two_bytes():
    record, used = decode_leaf(bytes([0x02, 0x08, 0x85, 0x7E, 0x83, 0x78, 0x00]))
    assert record.nudge == Nudge(5, -2)
    assert record.mtcode == 0x78
    assert used == 6


def test_char_sentinel_nudge_advances_six_bytes():
    data = bytes([0x02, 0x08, 0x80, 0x80]) + struct.pack('<hh', 40, -40) + bytes([0x83, 0x78, 0x00])
    record, used = decode_leaf(data)
    assert record.nudge == Nudge(40, -40)
    assert used == 10


def test_char_no_mtcode_keeps_font_positions_only():
    record, used = decode_leaf(bytes([0x02, 0x34, 0x83, 0x61, 0x34, 0x12]))
    assert record.mtcode is None
    assert record.font_position_8 == 0x61
    assert record.font_position_16 == 0x1234
    assert record.font_position == 0x1234
    assert used == 5


def test_char_mtcode_and_font_position_together():
    record, _ = decode_leaf(bytes([0x02, 0x04, 0x86, 0xB1, 0x03, 0x61]))
    assert record.mtcode == 0x3B1
    assert record.font_position_8 == 0x61


def test_char_without_any_identity_is_malformed():
    with pytest.raises(MalformedBufferError) as exc_info:
        decode_leaf(bytes([0x02, 0x20, 0x83]))
    assert exc_info.value.tag == RecordType.CHAR


def test_negative_typeface_refers_to_font_table():
    record, _ = decode_leaf(bytes([0x02, 0x24, 0x7E, 0x61]))
    assert record.typeface == -2
    assert record.font_index == 1
    assert record.style is None
    assert record.typeface_name == 'font1'


def test_truncated_char_reports_tag_and_field():
    with pytest.raises(MalformedBufferError) as exc_info:
        decode_mtef(HEADER + bytes([0x02, 0x00, 0x83, 0x78]))
    assert exc_info.value.tag == RecordType.CHAR
    assert exc_info.value.field == 'char.mtcode'
    assert exc_info.value.offset == len(HEADER) + 3


@pytest.mark.parametrize('tag', [RecordType.FULL, RecordType.SUB, RecordType.SUB2,
                                 RecordType.SYM, RecordType.SUBSYM])
def test_size_markers_have_no_payload(tag):
    record, used = decode_leaf(bytes([tag]))
    assert record == SizeMarker(tag)
    assert used == 0


def test_size_marker_typesize():
    assert SizeMarker(RecordType.SUB2).typesize == Typesize.SUB2


def test_unknown_tag_is_unhandled():
    with pytest.raises(UnhandledTagError) as exc_info:
        decode_mtef(mtef(bytes([0x14])))
    assert exc_info.value.tag == 20
    assert exc_info.value.offset == len(HEADER)


@pytest.mark.parametrize('payload', [
    bytes([0x04, 0x00, 0x01, 0x00]),
    bytes([0x05]),
    bytes([0x06, 0x00, 0x09]),
    bytes([0x07, 0x00]),
    bytes([0x09, 0x01, 0x80]),
    bytes([0x0F, 0x00]),
    bytes([0x10, 0x00, 0, 0, 0, 0, 0, 0]),
])
def test_extended_records_are_unsupported_by_default(payload):
    with pytest.raises(UnsupportedRecordError) as exc_info:
        decode_mtef(mtef(payload))
    assert exc_info.value.tag == payload[0]
    assert isinstance(exc_info.value, UnhandledTagError)


def test_future_record_is_carried_opaquely():
    document = decode_mtef(mtef(bytes([100, 0x03]) + b'abc', char(0x78)))
    assert document.objects[0] == FutureRecord(tag=100, payload=b'abc')
    assert isinstance(document.objects[1], Character)


def test_future_record_with_wide_length():
    payload = bytes(300)
    document = decode_mtef(mtef(bytes([120, 0xFF]) + struct.pack('<H', 300) + payload))
    assert document.objects == (FutureRecord(tag=120, payload=payload),)


def test_truncated_future_record():
    with pytest.raises(MalformedBufferError):
        decode_mtef(HEADER + bytes([100, 0x05]) + b'ab')


def test_template_fields_and_two_byte_variation():
    document = decode_mtef(mtef(
        bytes([0x03, 0x00, 0x0A, 0x81, 0x02, 0x07]) + line(char(0x78)) + b'\x00'
    ))
    template = document.objects[0]
    assert isinstance(template, Template)
    assert template.selector == 10
    assert template.variation == 0x201
    assert template.template_options == 0x07
    assert len(template.slots) == 1


def test_template_symbols_are_separate_from_slots():
    document = decode_mtef(mtef(tmpl(1, 3, line(char(0x78)), char(0x28), char(0x29))))
    template = document.objects[0]
    assert len(template.slots) == 1
    assert [c.mtcode for c in template.symbols] == [0x28, 0x29]


def test_null_line_has_no_object_list():
    document = decode_mtef(mtef(NULL_LINE, char(0x78)))
    assert len(document.objects) == 2
    assert document.objects[0].null
    assert document.objects[0].objects == ()


def test_line_spacing_option():
    document = decode_mtef(mtef(bytes([0x01, 0x04, 0x0C]) + chars('a') + b'\x00'))
    assert document.objects[0].line_spacing == 12


def test_line_spacing_is_a_single_byte():
    document = decode_mtef(mtef(bytes([0x01, 0x04, 0xFF]) + char(0x61) + b'\x00'))
    first = document.objects[0]
    assert first.line_spacing == 0xFF
    assert len(first.objects) == 1
    assert first.objects[0].mtcode == 0x61


def test_eqn_prefs_become_document_preferences():
    prefs = bytes.fromhex('12 00 01 212F 01 410F 02 00 0102')
    document = decode_mtef(mtef(prefs, char(0x78)))
    assert len(document.objects) == 1
    assert document.preferences.sizes == (Dimension('12', 'pt'),)
    assert document.preferences.spaces == (Dimension('10', '%'),)
    assert document.preferences.styles == (None, StyleOverride(1, 2))


def test_last_eqn_prefs_wins():
    first = bytes.fromhex('12 00 00 00 00')
    second = bytes.fromhex('12 01 00 00 00')
    document = decode_mtef(mtef(first, second))
    assert document.preferences.options == 1


def test_font_style_def_goes_to_table():
    document = decode_mtef(mtef(bytes([0x08, 0x01, 0x02])))
    assert document.objects == ()
    assert document.tables.font_styles[0].font_index == 1
    assert document.tables.font_style(0).char_style == 2


def test_unclosed_template_list_is_malformed():
    data = HEADER + bytes([0x03, 0x00, 0x0B, 0x00, 0x00]) + line(char(0x61))
    with pytest.raises(MalformedBufferError) as exc_info:
        decode_mtef(data)
    assert exc_info.value.tag == RecordType.TMPL
    assert exc_info.value.field == 'object_list'


def test_nesting_deeper_than_limit_fails():
    data = mtef(line(line(line(char(0x78)))))
    assert decode_mtef(data, DecoderConfig(max_depth=3)).objects
    with pytest.raises(NestingOverflowError) as exc_info:
        decode_mtef(data, DecoderConfig(max_depth=2))
    assert exc_info.value.depth == 3
    assert exc_info.value.max_depth == 2


# NGỮ PHÁP MỞ RỘNG


def test_pile_record():
    data = mtef(bytes([0x04, 0x00, 0x01, 0x00]) + line(char(0x61)) + line(char(0x62)) + b'\x00')
    pile = decode_mtef(data, EXTENDED).objects[0]
    assert isinstance(pile, Pile)
    assert pile.halign == 1
    assert len(pile.lines) == 2


def test_matrix_record_partition_sizes():
    cells = b''.join(line(char(ord(c))) for c in 'abcd')
    header = bytes([0x05, 0x00, 0x00, 0x01, 0x02, 0x02, 0x02])
    data = mtef(header + b'\x00' + b'\x00' + cells + b'\x00')
    matrix = decode_mtef(data, EXTENDED).objects[0]
    assert isinstance(matrix, Matrix)
    assert (matrix.rows, matrix.cols) == (2, 2)
    assert matrix.row_parts == b'\x00'
    assert [cell.objects[0].mtcode for cell in matrix.row(1)] == [ord('c'), ord('d')]


def test_matrix_partition_bytes_round_up():
    # 4 hàng → 5 đường x 2 bit = 10 bit → 2 byte
    cells = b''.join(line(char(0x30 + i)) for i in range(4))
    header = bytes([0x05, 0x00, 0x00, 0x00, 0x00, 0x04, 0x01])
    data = mtef(header + b'\xAA\xAA' + b'\x00' + cells + b'\x00')
    matrix = decode_mtef(data, EXTENDED).objects[0]
    assert matrix.row_parts == b'\xAA\xAA'
    assert len(matrix.cells) == 4


def test_char_embellishment_list():
    data = mtef(bytes([0x02, 0x01, 0x83, 0x78, 0x00]) + bytes([0x06, 0x00, 0x09]) + b'\x00')
    character = decode_mtef(data, EXTENDED).objects[0]
    assert character.embellishments == (Embellishment(embell_type=9, options=character.embellishments[0].options),)


def test_embellishment_list_rejects_other_records():
    data = mtef(bytes([0x02, 0x01, 0x83, 0x78, 0x00]) + char(0x61) + b'\x00')
    with pytest.raises(MalformedBufferError):
        decode_mtef(data, EXTENDED)


@pytest.mark.parametrize('payload, expected', [
    (bytes([0x09, 101]) + struct.pack('<h', 240), SizeChange(point_size=240)),
    (bytes([0x09, 100, 0x02]) + struct.pack('<h', -5), SizeChange(lsize=2, delta=-5)),
    (bytes([0x09, 0x01, 130]), SizeChange(lsize=1, delta=2)),
])
def test_general_size_record(payload, expected):
    record, used = decode_leaf(payload, EXTENDED)
    assert record == expected
    assert used == len(payload) - 1


def test_color_records():
    color_def = bytes([0x10, 0x04]) + struct.pack('<HHH', 0xFFFF, 0, 0) + b'red\x00'
    document = decode_mtef(mtef(color_def, bytes([0x0F, 0x00]), char(0x78)), EXTENDED)
    assert document.objects[0] == ColorChange(0)
    color = document.tables.color(0)
    assert color.name == 'red'
    assert color.model == 'rgb'
    assert color.values == (0xFFFF, 0, 0)


def test_cmyk_color_def_has_four_channels():
    color_def = bytes([0x10, 0x01]) + struct.pack('<HHHH', 1, 2, 3, 4)
    document = decode_mtef(mtef(color_def), EXTENDED)
    assert document.tables.colors[0].values == (1, 2, 3, 4)
    assert document.tables.colors[0].model == 'cmyk'


def test_line_with_ruler():
    ruler = bytes([0x07, 0x01, 0x00]) + struct.pack('<h', 100)
    document = decode_mtef(mtef(bytes([0x01, 0x02]) + ruler + char(0x78) + b'\x00'), EXTENDED)
    assert isinstance(document.objects[0], Line)
    assert document.objects[0].ruler.stops == (TabStop(0, 100),)


def test_lp_ruler_flag_requires_ruler_record():
    document_bytes = mtef(bytes([0x01, 0x02]) + char(0x78) + b'\x00')
    with pytest.raises(MalformedBufferError):
        decode_mtef(document_bytes, EXTENDED)


def _nested_lines(levels):
    data = char(0x78)
    for _ in range(levels):
        data = line(data)
    return data


def test_nesting_at_max_limit_raises_nesting_error():
    data = mtef(_nested_lines(300))
    with pytest.raises(NestingOverflowError) as exc_info:
        decode_mtef(data, DecoderConfig(max_depth=MAX_NESTING_LIMIT))
    assert exc_info.value.depth == MAX_NESTING_LIMIT + 1


def test_nesting_exactly_at_max_limit_decodes():
    data = mtef(_nested_lines(MAX_NESTING_LIMIT))
    node = decode_mtef(data, DecoderConfig(max_depth=MAX_NESTING_LIMIT)).objects[0]
    for _ in range(MAX_NESTING_LIMIT - 1):
        node = node.objects[0]
    assert node.objects[0].mtcode == 0x78


def test_stack_exhaustion_maps_to_nesting_error():
    limit = sys.getrecursionlimit()
    sys.setrecursionlimit(len(inspect.stack(0)) + 60)
    try:
        with pytest.raises(NestingOverflowError) as exc_info:
            decode_mtef(mtef(_nested_lines(100)), DecoderConfig(max_depth=MAX_NESTING_LIMIT))
    finally:
        sys.setrecursionlimit(limit)
    assert exc_info.value.max_depth == MAX_NESTING_LIMIT
