# chuyen_latex.py - Chuyển cây công thức (EquationDocument) → LaTeX
#
# Duyệt cây theo chiều sâu, trái sang phải trong mỗi object list.
# Glyph, macro template và dấu embellishment lấy từ các bảng tra truyền vào
# (mặc định trong config), không cố định trong logic dịch.
# Marker kích thước (FULL/SUB/...) là trạng thái duy nhất phụ thuộc thứ tự:
# nó có hiệu lực cho các node anh em phía sau tới marker kế tiếp hoặc hết list.

import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

from mtef2latex.ban_ghi import (
    Character, ColorChange, Embellishment, FutureRecord, Line, Matrix, Pile,
    SizeChange, SizeMarker, Template,
)
from mtef2latex.cay_cong_thuc import EquationDocument
from mtef2latex.bang_dinh_nghia import DefinitionTables
from mtef2latex.config import (
    EMBELL_TO_LATEX, FONT_POSITION_TO_LATEX, FUNC_NAME_MAP, LATEX_SPECIAL,
    MTCODE_TO_LATEX, PILE_ALIGN, SCRIPT_SELECTORS, SIZE_STYLES,
    TEMPLATE_SYMBOL_DEFAULTS, TEMPLATE_TO_LATEX, UNRESOLVED_PLACEHOLDER,
    Typeface, Typesize,
)
from mtef2latex.loi import TranslationError, UnresolvedIndexError, UnresolvedLookupError
from mtef2latex.utils import loc_ky_tu, noi_latex

logger = logging.getLogger("mtef2latex.chuyen_latex")

_THAM_SO = re.compile(r'#([1-9ST])')

# Cỡ của slot chỉ số: mỗi mức lồng nhỏ đi một bậc
_SCRIPT_SIZE = {
    Typesize.FULL: Typesize.SUB,
    Typesize.SUB: Typesize.SUB2,
}

_UNRESOLVED_POLICIES = ('raise', 'placeholder')


def _printable_mtcode(code: int) -> bool:
    # Bỏ ký tự điều khiển, surrogate và vùng private use (MTExtra)
    if code < 0x20 or code == 0x7F or code >= 0x10000:
        return False
    if 0xD800 <= code <= 0xDFFF or 0xE000 <= code <= 0xF8FF:
        return False
    return True


class LatexTranslator:
    """Dịch EquationDocument sang chuỗi LaTeX (math mode, không có $...$).

    glyphs: MTCode → LaTeX
    font_glyphs: (tên encoding, vị trí font) → LaTeX
    templates: (selector, variation) hoặc (selector, None) → macro shape
    embellishments: loại embellishment → shape với #1 là ký tự
    on_unresolved: "raise" ném UnresolvedLookupError ở node đầu tiên không tra được;
        "placeholder" thay bằng UNRESOLVED_PLACEHOLDER và ghi lỗi vào self.errors.

    Mỗi instance chỉ dịch một document tại một thời điểm.
    """

    def __init__(self, glyphs: Optional[Dict[int, str]] = None,
                 font_glyphs: Optional[Dict[Tuple[str, int], str]] = None,
                 templates: Optional[Dict[tuple, str]] = None,
                 embellishments: Optional[Dict[int, str]] = None,
                 functions: Optional[Dict[str, str]] = None,
                 on_unresolved: str = 'raise'):
        if on_unresolved not in _UNRESOLVED_POLICIES:
            raise ValueError(f'on_unresolved phải là một trong {_UNRESOLVED_POLICIES}, nhận {on_unresolved!r}')
        self.glyphs = MTCODE_TO_LATEX if glyphs is None else glyphs
        self.font_glyphs = FONT_POSITION_TO_LATEX if font_glyphs is None else font_glyphs
        self.templates = TEMPLATE_TO_LATEX if templates is None else templates
        self.embellishments = EMBELL_TO_LATEX if embellishments is None else embellishments
        self.functions = FUNC_NAME_MAP if functions is None else functions
        self.on_unresolved = on_unresolved
        self.errors: List[TranslationError] = []
        self._document: Optional[EquationDocument] = None

    # HÀM CHÍNH

    def translate(self, document: EquationDocument) -> str:
        self.errors = []
        self._document = document
        try:
            return self._translate_list(document.objects, Typesize.FULL).strip()
        finally:
            self._document = None

    @property
    def _tables(self) -> DefinitionTables:
        return self._document.tables

    def _unresolved(self, error: TranslationError) -> str:
        if self.on_unresolved == 'raise':
            raise error
        logger.warning('Thay placeholder cho node không dịch được: %s', error)
        self.errors.append(error)
        return UNRESOLVED_PLACEHOLDER

    # OBJECT LIST

    def _translate_list(self, nodes: Sequence, size: Typesize) -> str:
        # size: cỡ kế thừa của list; marker khác cỡ này mở nhóm {\scriptstyle ...}
        parts = []
        group_open = False
        current = size
        i = 0
        while i < len(nodes):
            node = nodes[i]
            if isinstance(node, SizeMarker):
                if group_open:
                    parts.append('}')
                    group_open = False
                current = node.typesize
                if current != size:
                    parts.append('{' + SIZE_STYLES[current] + ' ')
                    group_open = True
                i += 1
            elif isinstance(node, Character) and self._run_style(node) is not None:
                j = self._run_end(nodes, i)
                parts.append(self._translate_run(nodes[i:j]))
                i = j
            else:
                parts.append(self._translate_node(node, current))
                i += 1
        if group_open:
            parts.append('}')
        return noi_latex(parts)

    def _translate_node(self, node, size: Typesize) -> str:
        if isinstance(node, Character):
            return self._translate_char(node)
        if isinstance(node, Line):
            return self._translate_list(node.objects, size)
        if isinstance(node, Template):
            return self._translate_template(node, size)
        if isinstance(node, Pile):
            return self._translate_pile(node, size)
        if isinstance(node, Matrix):
            return self._translate_matrix(node, size)
        if isinstance(node, (SizeChange, ColorChange, FutureRecord, Embellishment)):
            # Không ảnh hưởng tới LaTeX
            logger.debug('Bỏ qua %s khi dịch', type(node).__name__)
            return ''
        return self._unresolved(UnresolvedLookupError('node', type(node).__name__, node=node))

    # KÝ TỰ

    @staticmethod
    def _run_style(char: Character) -> Optional[Typeface]:
        # Ký tự function/text liên tiếp được gom thành một cụm
        if char.embellishments:
            return None
        if char.style in (Typeface.FUNCTION, Typeface.TEXT):
            return char.style
        return None

    def _run_end(self, nodes: Sequence, start: int) -> int:
        style = self._run_style(nodes[start])
        end = start + 1
        while end < len(nodes):
            node = nodes[end]
            if not isinstance(node, Character) or self._run_style(node) != style:
                break
            if style == Typeface.FUNCTION and node.function_start:
                break
            end += 1
        return end

    def _translate_run(self, chars: Sequence[Character]) -> str:
        if chars[0].style == Typeface.TEXT:
            return r'\text{' + ''.join(self._text_char(c) for c in chars) + '}'

        name = ''.join(self._raw_char(c) or '?' for c in chars)
        if name in self.functions:
            return self.functions[name] + ' '
        if all(self._raw_char(c) for c in chars):
            return r'\mathrm{' + loc_ky_tu(name) + '}'
        return r'\mathrm{' + noi_latex(self._glyph(c) for c in chars) + '}'

    @staticmethod
    def _raw_char(char: Character) -> str:
        # Ký tự ASCII in được của MTCode, '' nếu không có
        if char.mtcode is not None and 0x20 <= char.mtcode < 0x7F:
            return chr(char.mtcode)
        return ''

    def _text_char(self, char: Character) -> str:
        raw = self._raw_char(char)
        if raw:
            return loc_ky_tu(raw)
        return r'\ensuremath{' + self._glyph(char) + '}'

    def _translate_char(self, char: Character) -> str:
        glyph = self._glyph(char)
        if char.style == Typeface.VECTOR:
            glyph = r'\boldsymbol{' + glyph + '}'
        for embell in char.embellishments:
            shape = self.embellishments.get(embell.embell_type)
            if shape is None:
                return self._unresolved(UnresolvedLookupError('embellishment', embell.embell_type, node=char))
            glyph = shape.replace('#1', glyph)
        return glyph

    def _glyph(self, char: Character) -> str:
        # Thứ tự tra: MTCode, rồi vị trí font qua font → encoding
        if char.mtcode is not None:
            code = char.mtcode
            if code in self.glyphs:
                return self.glyphs[code]
            if _printable_mtcode(code):
                ch = chr(code)
                return LATEX_SPECIAL.get(ch, ch)

        position = char.font_position
        if position is not None:
            encoding = self._char_encoding(char)
            key = (encoding, position)
            if key in self.font_glyphs:
                return self.font_glyphs[key]
            if encoding in ('MTCode', 'Unknown') and 0x20 < position < 0x7F:
                ch = chr(position)
                return LATEX_SPECIAL.get(ch, ch)
            return self._unresolved(UnresolvedLookupError('glyph', key, node=char))

        return self._unresolved(UnresolvedLookupError('glyph', ('mtcode', char.mtcode), node=char))

    def _char_encoding(self, char: Character) -> str:
        # Font tường minh (typeface âm) hoặc font gán cho style trong EQN_PREFS
        font_index = char.font_index
        if font_index is None:
            font_index = self._style_font_index(char.typeface)
        if font_index is None:
            return 'Unknown'
        try:
            return self._tables.font_encoding(font_index)
        except UnresolvedIndexError as loi:
            # Chỉ số bảng hỏng luôn ném ra, kể cả ở chế độ placeholder
            raise UnresolvedIndexError(loi.table, loi.index, loi.size, node=char) from loi

    def _style_font_index(self, typeface: int) -> Optional[int]:
        preferences = self._document.preferences
        if preferences is None or not 1 <= typeface <= len(preferences.styles):
            return None
        override = preferences.styles[typeface - 1]
        if override is None:
            return None
        return override.font_def_index - 1

    # TEMPLATE

    def _translate_template(self, tmpl: Template, size: Typesize) -> str:
        shape = self.templates.get((tmpl.selector, tmpl.variation))
        if shape is None:
            shape = self.templates.get((tmpl.selector, None))
        if shape is None:
            return self._unresolved(
                UnresolvedLookupError('template', (tmpl.selector, tmpl.variation), node=tmpl))

        slot_size = size
        if tmpl.selector in SCRIPT_SELECTORS:
            slot_size = _SCRIPT_SIZE.get(size, Typesize.SUB2)
        slots = [self._translate_list(slot, slot_size) for slot in tmpl.slots]

        symbols = [self._glyph(c) for c in tmpl.symbols if isinstance(c, Character)]
        defaults = TEMPLATE_SYMBOL_DEFAULTS.get(tmpl.selector, ('', ''))

        def thay(match):
            key = match.group(1)
            if key == 'S':
                return symbols[0] if symbols else defaults[0]
            if key == 'T':
                return symbols[1] if len(symbols) > 1 else defaults[1]
            index = int(key) - 1
            return slots[index] if index < len(slots) else ''

        return _THAM_SO.sub(thay, shape)

    # PILE / MATRIX

    def _translate_pile(self, pile: Pile, size: Typesize) -> str:
        rows = [self._translate_node(line, size) for line in pile.lines]
        if len(rows) <= 1:
            return rows[0] if rows else ''
        align = PILE_ALIGN.get(pile.halign, 'c')
        return r'\begin{array}{' + align + '} ' + r' \\ '.join(rows) + r' \end{array}'

    def _translate_matrix(self, matrix: Matrix, size: Typesize) -> str:
        # MATRIX 1x1 chỉ là wrapper
        if matrix.rows == 1 and matrix.cols == 1 and len(matrix.cells) == 1:
            return self._translate_node(matrix.cells[0], size)

        result_rows = []
        for r in range(matrix.rows):
            cells = [self._translate_node(cell, size) for cell in matrix.row(r)]
            cells += [''] * (matrix.cols - len(cells))
            result_rows.append(' & '.join(cells))
        return r'\begin{matrix} ' + r' \\ '.join(result_rows) + r' \end{matrix}'


__all__ = ['LatexTranslator']
