# bang_dinh_nghia.py - Bảng định nghĩa encoding / font / font style / màu
#
# Mỗi bảng chỉ thêm vào cuối, chỉ số = thứ tự xuất hiện đầu tiên trong stream.
# Bảng encoding có sẵn 4 mục MTCode, Unknown, Symbol, MTExtra ở chỉ số 0-3.
# Chỉ số chỉ được tra khi dịch, không kiểm tra lúc giải mã (cho phép tham chiếu tới trước).

import logging
from typing import List, Optional

from mtef2latex.ban_ghi import ColorDef, EncodingDef, FontDef, FontStyleDef
from mtef2latex.config import BUILTIN_ENCODINGS, TraceHook
from mtef2latex.loi import UnresolvedIndexError

logger = logging.getLogger("mtef2latex.bang_dinh_nghia")


class DefinitionTables:

    def __init__(self, trace: Optional[TraceHook] = None):
        self._encodings: List[str] = list(BUILTIN_ENCODINGS)
        self._fonts: List[FontDef] = []
        self._font_styles: List[FontStyleDef] = []
        self._colors: List[ColorDef] = []
        self._trace = trace
        self._frozen = False

    # THÊM MỤC

    def _append(self, table_name: str, table: list, entry) -> int:
        if self._frozen:
            raise RuntimeError(f'bảng {table_name} đã đóng, không thêm được')
        table.append(entry)
        index = len(table) - 1
        logger.debug('Thêm %s[%d] = %r', table_name, index, entry)
        if self._trace is not None:
            self._trace('table', table=table_name, index=index, entry=entry)
        return index

    def add(self, definition) -> int:
        # Thêm một record định nghĩa vào bảng tương ứng
        if isinstance(definition, EncodingDef):
            return self.add_encoding(definition.name)
        if isinstance(definition, FontDef):
            return self.add_font(definition)
        if isinstance(definition, FontStyleDef):
            return self.add_font_style(definition)
        if isinstance(definition, ColorDef):
            return self.add_color(definition)
        raise TypeError(f'không phải record định nghĩa: {definition!r}')

    def add_encoding(self, name: str) -> int:
        return self._append('encoding', self._encodings, name)

    def add_font(self, font: FontDef) -> int:
        return self._append('font', self._fonts, font)

    def add_font_style(self, style: FontStyleDef) -> int:
        return self._append('font_style', self._font_styles, style)

    def add_color(self, color: ColorDef) -> int:
        return self._append('color', self._colors, color)

    def freeze(self) -> 'DefinitionTables':
        self._frozen = True
        self._trace = None
        return self

    # TRA CỨU

    @staticmethod
    def _lookup(table_name: str, table: list, index: int):
        if index < 0 or index >= len(table):
            raise UnresolvedIndexError(table_name, index, len(table))
        return table[index]

    @property
    def encodings(self):
        return tuple(self._encodings)

    @property
    def fonts(self):
        return tuple(self._fonts)

    @property
    def font_styles(self):
        return tuple(self._font_styles)

    @property
    def colors(self):
        return tuple(self._colors)

    def encoding(self, index: int) -> str:
        return self._lookup('encoding', self._encodings, index)

    def font(self, index: int) -> FontDef:
        return self._lookup('font', self._fonts, index)

    def font_style(self, index: int) -> FontStyleDef:
        return self._lookup('font_style', self._font_styles, index)

    def color(self, index: int) -> ColorDef:
        return self._lookup('color', self._colors, index)

    def font_encoding(self, font_index: int) -> str:
        # Tên encoding của font thứ font_index
        return self.encoding(self.font(font_index).encoding_index)

    def __repr__(self):
        return (f'DefinitionTables(encodings={len(self._encodings)}, fonts={len(self._fonts)}, '
                f'font_styles={len(self._font_styles)}, colors={len(self._colors)})')
