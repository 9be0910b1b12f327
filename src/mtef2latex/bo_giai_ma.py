# bo_giai_ma.py - Giải mã một record MTEF từ tag đã đọc
#
# RecordDecoder.decode(tag, cursor, depth) tiêu thụ đúng các byte của record
# (kể cả object list con) và trả về đúng một record:
#   Node, record định nghĩa, hoặc END.
# Object list con được đọc qua list_reader do TreeBuilder cung cấp.

import logging
from typing import Callable, Tuple

from mtef2latex.ban_ghi import (
    END, Character, ColorChange, ColorDef, Embellishment, EncodingDef,
    EquationPreferences, FontDef, FontStyleDef, FutureRecord, Line, Matrix,
    Pile, Ruler, SizeChange, SizeMarker, StyleOverride, TabStop, Template,
)
from mtef2latex.con_tro import ByteCursor
from mtef2latex.config import (
    DecoderConfig, RecordOptions, RecordType, EXTENDED_RECORD_TAGS,
    SIZE_EXPLICIT_POINT, SIZE_LARGE_DELTA, TYPEFACE_BIAS,
)
from mtef2latex.giai_ma import (
    decode_dimension_array, decode_nudge, decode_string, decode_unsigned,
    decode_variation,
)
from mtef2latex.loi import (
    MalformedBufferError, UnhandledTagError, UnsupportedRecordError,
)

logger = logging.getLogger("mtef2latex.bo_giai_ma")

ListReader = Callable[[ByteCursor, int, int], Tuple]


def _matrix_parts_size(count: int) -> int:
    # Mỗi đường phân cách 2 bit, có count + 1 đường, làm tròn lên theo byte
    return ((count + 1) * 2 + 7) // 8


class RecordDecoder:

    def __init__(self, config: DecoderConfig, list_reader: ListReader):
        self.config = config
        self._read_list = list_reader
        self._parsers = {
            RecordType.END: self._parse_end,
            RecordType.LINE: self._parse_line,
            RecordType.CHAR: self._parse_char,
            RecordType.TMPL: self._parse_tmpl,
            RecordType.PILE: self._parse_pile,
            RecordType.MATRIX: self._parse_matrix,
            RecordType.EMBELL: self._parse_embell,
            RecordType.RULER: self._parse_ruler,
            RecordType.FONT_STYLE_DEF: self._parse_font_style_def,
            RecordType.SIZE: self._parse_size,
            RecordType.FULL: self._parse_size_marker,
            RecordType.SUB: self._parse_size_marker,
            RecordType.SUB2: self._parse_size_marker,
            RecordType.SYM: self._parse_size_marker,
            RecordType.SUBSYM: self._parse_size_marker,
            RecordType.COLOR: self._parse_color,
            RecordType.COLOR_DEF: self._parse_color_def,
            RecordType.FONT_DEF: self._parse_font_def,
            RecordType.EQN_PREFS: self._parse_eqn_prefs,
            RecordType.ENCODING_DEF: self._parse_encoding_def,
        }

    def decode(self, tag: int, cursor: ByteCursor, depth: int = 0):
        # cursor đứng ngay sau byte tag
        offset = cursor.pos - 1
        if tag >= RecordType.FUTURE:
            parser = self._parse_future
        else:
            parser = self._parsers.get(tag)
            if parser is None:
                raise UnhandledTagError(f'tag {tag} không có ngữ pháp', offset=offset, tag=tag)
            self._require_grammar(tag, offset)

        try:
            return parser(tag, cursor, depth)
        except MalformedBufferError as loi:
            if loi.tag is not None:
                raise
            # Gắn tag của record đang giải cho lỗi đọc byte cấp thấp
            raise MalformedBufferError(loi.reason, offset=loi.offset, tag=tag, field=loi.field) from loi

    def _require_grammar(self, tag: int, offset: int):
        if tag in EXTENDED_RECORD_TAGS and not self.config.extended_records:
            raise UnsupportedRecordError(
                f'record {RecordType(tag).name} chưa được hỗ trợ (cần extended_records)',
                offset=offset, tag=tag,
            )

    def _read_options(self, cursor: ByteCursor, name: str) -> RecordOptions:
        return RecordOptions(cursor.read_u8(f'{name}.options'))

    # RECORD CẤU TRÚC

    def _parse_end(self, tag, cursor, depth):
        return END

    def _parse_line(self, tag, cursor, depth):
        options = self._read_options(cursor, 'line')
        nudge = decode_nudge(cursor) if options.nudge else None
        line_spacing = cursor.read_u8('line.spacing') if options.line_lspace else None
        ruler = self._read_embedded_ruler(cursor) if options.lp_ruler else None
        if options.line_null:
            # Line placeholder không có object list
            objects = ()
        else:
            objects = self._read_list(cursor, depth + 1, RecordType.LINE)
        return Line(objects=objects, options=options, nudge=nudge,
                    line_spacing=line_spacing, ruler=ruler)

    def _parse_char(self, tag, cursor, depth):
        start = cursor.pos - 1
        options = self._read_options(cursor, 'char')
        nudge = decode_nudge(cursor) if options.nudge else None
        typeface = cursor.read_u8('char.typeface') - TYPEFACE_BIAS
        mtcode = None if options.no_mtcode else cursor.read_u16('char.mtcode')
        position_8 = cursor.read_u8('char.position8') if options.char_enc_8 else None
        position_16 = cursor.read_u16('char.position16') if options.char_enc_16 else None
        if mtcode is None and position_8 is None and position_16 is None:
            raise MalformedBufferError(
                'ký tự không có MTCode lẫn vị trí font', offset=start, tag=tag, field='char.options',
            )

        embellishments = ()
        if options.char_embell:
            embellishments = self._read_list(cursor, depth + 1, RecordType.CHAR)
            for item in embellishments:
                if not isinstance(item, Embellishment):
                    raise MalformedBufferError(
                        f'embellishment list chứa {type(item).__name__}',
                        offset=start, tag=tag, field='char.embellishments',
                    )

        return Character(
            typeface=typeface, mtcode=mtcode,
            font_position_8=position_8, font_position_16=position_16,
            options=options, nudge=nudge, embellishments=embellishments,
        )

    def _parse_tmpl(self, tag, cursor, depth):
        options = self._read_options(cursor, 'tmpl')
        nudge = decode_nudge(cursor) if options.nudge else None
        selector = cursor.read_u8('tmpl.selector')
        variation = decode_variation(cursor)
        template_options = cursor.read_u8('tmpl.template_options')
        children = self._read_list(cursor, depth + 1, RecordType.TMPL)
        return Template(
            selector=selector, variation=variation, template_options=template_options,
            children=children, options=options, nudge=nudge,
        )

    def _parse_pile(self, tag, cursor, depth):
        options = self._read_options(cursor, 'pile')
        nudge = decode_nudge(cursor) if options.nudge else None
        halign = cursor.read_u8('pile.halign')
        valign = cursor.read_u8('pile.valign')
        ruler = self._read_embedded_ruler(cursor) if options.lp_ruler else None
        lines = self._read_list(cursor, depth + 1, RecordType.PILE)
        return Pile(halign=halign, valign=valign, lines=lines,
                    options=options, nudge=nudge, ruler=ruler)

    def _parse_matrix(self, tag, cursor, depth):
        options = self._read_options(cursor, 'matrix')
        nudge = decode_nudge(cursor) if options.nudge else None
        valign = cursor.read_u8('matrix.valign')
        h_just = cursor.read_u8('matrix.h_just')
        v_just = cursor.read_u8('matrix.v_just')
        rows = cursor.read_u8('matrix.rows')
        cols = cursor.read_u8('matrix.cols')
        row_parts = cursor.read_bytes(_matrix_parts_size(rows), 'matrix.row_parts')
        col_parts = cursor.read_bytes(_matrix_parts_size(cols), 'matrix.col_parts')
        cells = self._read_list(cursor, depth + 1, RecordType.MATRIX)
        return Matrix(
            valign=valign, h_just=h_just, v_just=v_just, rows=rows, cols=cols,
            row_parts=row_parts, col_parts=col_parts, cells=cells,
            options=options, nudge=nudge,
        )

    def _parse_embell(self, tag, cursor, depth):
        options = self._read_options(cursor, 'embell')
        nudge = decode_nudge(cursor) if options.nudge else None
        embell_type = cursor.read_u8('embell.type')
        return Embellishment(embell_type=embell_type, options=options, nudge=nudge)

    def _parse_ruler(self, tag, cursor, depth):
        n_stops = cursor.read_u8('ruler.count')
        stops = []
        for _ in range(n_stops):
            stop_type = cursor.read_u8('ruler.type')
            offset = cursor.read_i16('ruler.offset')
            stops.append(TabStop(stop_type, offset))
        return Ruler(tuple(stops))

    def _read_embedded_ruler(self, cursor: ByteCursor) -> Ruler:
        # RULER theo sau LINE/PILE là một record đầy đủ, có byte tag riêng
        offset = cursor.pos
        tag = cursor.read_u8('ruler.tag')
        if tag != RecordType.RULER:
            raise MalformedBufferError(
                f'cần RULER sau cờ LP_RULER, gặp tag {tag}', offset=offset, tag=tag, field='ruler',
            )
        self._require_grammar(tag, offset)
        return self._parse_ruler(tag, cursor, 0)

    def _parse_size_marker(self, tag, cursor, depth):
        return SizeMarker(RecordType(tag))

    def _parse_size(self, tag, cursor, depth):
        first = cursor.read_u8('size.lsize')
        if first == SIZE_EXPLICIT_POINT:
            return SizeChange(point_size=cursor.read_i16('size.point'))
        if first == SIZE_LARGE_DELTA:
            lsize = cursor.read_u8('size.lsize')
            return SizeChange(lsize=lsize, delta=cursor.read_i16('size.delta'))
        return SizeChange(lsize=first, delta=cursor.read_u8('size.delta') - 128)

    def _parse_color(self, tag, cursor, depth):
        return ColorChange(decode_unsigned(cursor, 'color.index'))

    # RECORD ĐỊNH NGHĨA

    def _parse_color_def(self, tag, cursor, depth):
        options = self._read_options(cursor, 'color_def')
        count = 4 if options.color_cmyk else 3
        values = tuple(cursor.read_u16('color_def.value') for _ in range(count))
        name = None
        if options.color_name:
            name = decode_string(cursor, self.config.text_encoding, 'color_def.name')
        return ColorDef(options=options, values=values, name=name)

    def _parse_font_def(self, tag, cursor, depth):
        encoding_index = decode_unsigned(cursor, 'font_def.encoding')
        name = decode_string(cursor, self.config.text_encoding, 'font_def.name')
        return FontDef(encoding_index=encoding_index, name=name)

    def _parse_font_style_def(self, tag, cursor, depth):
        font_index = decode_unsigned(cursor, 'font_style_def.font')
        char_style = cursor.read_u8('font_style_def.style')
        return FontStyleDef(font_index=font_index, char_style=char_style)

    def _parse_eqn_prefs(self, tag, cursor, depth):
        options = cursor.read_u8('eqn_prefs.options')
        sizes = decode_dimension_array(cursor, cursor.read_u8('eqn_prefs.sizes'), 'eqn_prefs.sizes')
        spaces = decode_dimension_array(cursor, cursor.read_u8('eqn_prefs.spaces'), 'eqn_prefs.spaces')
        styles = []
        for _ in range(cursor.read_u8('eqn_prefs.styles')):
            font_def_index = cursor.read_u8('eqn_prefs.style')
            if font_def_index == 0:
                styles.append(None)
            else:
                styles.append(StyleOverride(font_def_index, cursor.read_u8('eqn_prefs.style')))
        return EquationPreferences(
            options=options, sizes=tuple(sizes), spaces=tuple(spaces), styles=tuple(styles),
        )

    def _parse_encoding_def(self, tag, cursor, depth):
        return EncodingDef(decode_string(cursor, self.config.text_encoding, 'encoding_def.name'))

    def _parse_future(self, tag, cursor, depth):
        # Record tương lai: độ dài tường minh, payload giữ nguyên không diễn giải
        length = decode_unsigned(cursor, 'future.length')
        return FutureRecord(tag=tag, payload=cursor.read_bytes(length, 'future.payload'))
