# config.py - Hằng số MTEF, cấu hình bộ giải mã, và bảng tra LaTeX cho dự án mtef2latex
#
# MTEF (MathType Equation Format) các phiên bản:
#   0 MathType Mac 1.x, 1 MathType Mac 2.x / Win 1.x, 2 MathType 3.x / Equation Editor 1.x,
#   3 Equation Editor 3.x, 4 MathType 3.5, 5 MathType 4.0 trở lên
# Header được mô tả ở đây là header của MTEF 5.

import logging
import os
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Optional

logger = logging.getLogger("mtef2latex.config")

# RECORD TYPES

class RecordType(IntEnum):
    END = 0             # kết thúc MTEF, pile, line, embellishment list, template
    LINE = 1            # line (slot)
    CHAR = 2
    TMPL = 3
    PILE = 4            # chồng dọc các line
    MATRIX = 5
    EMBELL = 6          # dấu trên ký tự (hat, prime...)
    RULER = 7           # vị trí tab-stop
    FONT_STYLE_DEF = 8
    SIZE = 9
    FULL = 10
    SUB = 11
    SUB2 = 12
    SYM = 13
    SUBSYM = 14
    COLOR = 15
    COLOR_DEF = 16
    FONT_DEF = 17
    EQN_PREFS = 18
    ENCODING_DEF = 19
    FUTURE = 100        # >= 100: có độ dài tường minh, bỏ qua được

# Năm record đánh dấu kích thước cố định (không có payload)
SIZE_MARKER_TAGS = (
    RecordType.FULL, RecordType.SUB, RecordType.SUB2,
    RecordType.SYM, RecordType.SUBSYM,
)

# Record không có độ dài chung, chỉ giải được khi biết chính xác layout
EXTENDED_RECORD_TAGS = (
    RecordType.PILE, RecordType.MATRIX, RecordType.EMBELL, RecordType.RULER,
    RecordType.COLOR, RecordType.COLOR_DEF, RecordType.SIZE,
)

# Hai bản tài liệu gốc ghi EMBELL/MATRIX là 5/6 và 6/5; dùng bảng chuẩn MATRIX=5, EMBELL=6

# OPTION FLAGS

OPT_NUDGE = 0x08                # nudge theo sau tag (mọi record cấu trúc)

OPT_CHAR_EMBELL = 0x01          # ký tự có embellishment list
OPT_CHAR_FUNC_START = 0x02      # ký tự bắt đầu một hàm (sin, cos...)
OPT_CHAR_ENC_CHAR_8 = 0x04      # có vị trí font 8-bit
OPT_CHAR_ENC_CHAR_16 = 0x10     # có vị trí font 16-bit
OPT_CHAR_ENC_NO_MTCODE = 0x20   # không có MTCode 16-bit

OPT_LINE_NULL = 0x01            # line chỉ là placeholder
OPT_LINE_LSPACE = 0x04          # có line spacing
OPT_LP_RULER = 0x02             # RULER theo sau LINE/PILE

COLOR_CMYK = 0x01
COLOR_SPOT = 0x02
COLOR_NAME = 0x04


class RecordOptions(int):
    # Byte option của record, mỗi cờ có một accessor riêng

    @property
    def nudge(self) -> bool:
        return bool(self & OPT_NUDGE)

    @property
    def char_embell(self) -> bool:
        return bool(self & OPT_CHAR_EMBELL)

    @property
    def char_func_start(self) -> bool:
        return bool(self & OPT_CHAR_FUNC_START)

    @property
    def char_enc_8(self) -> bool:
        return bool(self & OPT_CHAR_ENC_CHAR_8)

    @property
    def char_enc_16(self) -> bool:
        return bool(self & OPT_CHAR_ENC_CHAR_16)

    @property
    def no_mtcode(self) -> bool:
        return bool(self & OPT_CHAR_ENC_NO_MTCODE)

    @property
    def line_null(self) -> bool:
        return bool(self & OPT_LINE_NULL)

    @property
    def line_lspace(self) -> bool:
        return bool(self & OPT_LINE_LSPACE)

    @property
    def lp_ruler(self) -> bool:
        return bool(self & OPT_LP_RULER)

    @property
    def color_cmyk(self) -> bool:
        return bool(self & COLOR_CMYK)

    @property
    def color_spot(self) -> bool:
        return bool(self & COLOR_SPOT)

    @property
    def color_name(self) -> bool:
        return bool(self & COLOR_NAME)

    def __repr__(self):
        return f'RecordOptions(0x{int(self):02X})'

# TYPEFACE / TYPESIZE

TYPEFACE_BIAS = 128


class Typeface(IntEnum):
    TEXT = 1
    FUNCTION = 2
    VARIABLE = 3
    LC_GREEK = 4
    UC_GREEK = 5
    SYMBOL = 6
    VECTOR = 7
    NUMBER = 8
    USER1 = 9
    USER2 = 10
    MTEXTRA = 11
    TEXT_FE = 12
    EXPAND = 22
    MARKER = 23
    SPACE = 24


class Typesize(IntEnum):
    FULL = 0
    SUB = 1
    SUB2 = 2
    SYM = 3
    SUBSYM = 4
    USER1 = 5
    USER2 = 6
    DELTA = 7

# Record FULL..SUBSYM → typesize tương ứng
MARKER_TYPESIZE = {
    RecordType.FULL: Typesize.FULL,
    RecordType.SUB: Typesize.SUB,
    RecordType.SUB2: Typesize.SUB2,
    RecordType.SYM: Typesize.SYM,
    RecordType.SUBSYM: Typesize.SUBSYM,
}

# SIZE record: byte đầu 101 = point size tường minh, 100 = lsize + delta 16-bit
SIZE_EXPLICIT_POINT = 101
SIZE_LARGE_DELTA = 100

# Bốn encoding dựng sẵn, đứng trước mọi ENCODING_DEF trong bảng
BUILTIN_ENCODINGS = ('MTCode', 'Unknown', 'Symbol', 'MTExtra')

# Nudge: hai byte lệch 128; nếu một trong hai bằng 128 thì có thêm hai số 16-bit
NUDGE_SENTINEL = 128

# Đơn vị trong chuỗi kích thước nibble
DIMENSION_UNITS = {0: 'in', 1: 'cm', 2: 'pt', 3: 'pc', 4: '%'}
DIMENSION_DIGITS = {
    0x0: '0', 0x1: '1', 0x2: '2', 0x3: '3', 0x4: '4',
    0x5: '5', 0x6: '6', 0x7: '7', 0x8: '8', 0x9: '9',
    0xA: '.', 0xB: '-',
}
DIMENSION_END = 0xF

# CẤU HÌNH BỘ GIẢI MÃ

MAX_NESTING_DEPTH = 64
# Giới hạn trên của max_depth, mỗi mức lồng tốn khoảng 4 frame Python
MAX_NESTING_LIMIT = 128
DEFAULT_TEXT_ENCODING = 'latin-1'

TraceHook = Callable[..., Any]


def doc_bien_moi_truong_bool(ten: str, mac_dinh: bool) -> bool:
    gia_tri = os.getenv(ten, '').strip().lower()
    if not gia_tri:
        return mac_dinh
    if gia_tri in ('1', 'true', 'yes', 'on'):
        return True
    if gia_tri in ('0', 'false', 'no', 'off'):
        return False
    logger.warning('Giá trị %s=%r không hợp lệ, dùng mặc định %s', ten, gia_tri, mac_dinh)
    return mac_dinh


@dataclass(frozen=True)
class DecoderConfig:
    max_depth: int = MAX_NESTING_DEPTH
    text_encoding: str = DEFAULT_TEXT_ENCODING
    # Bật layout vendor cho PILE/MATRIX/EMBELL/RULER/COLOR/COLOR_DEF/SIZE
    extended_records: bool = False
    trace: Optional[TraceHook] = None

    def __post_init__(self):
        if not 1 <= self.max_depth <= MAX_NESTING_LIMIT:
            raise ValueError(f'max_depth phải trong [1, {MAX_NESTING_LIMIT}], nhận {self.max_depth}')
        # Kiểm tra encoding sớm, tránh lỗi LookupError giữa lúc giải mã
        ''.encode(self.text_encoding)

    @classmethod
    def from_env(cls, **overrides) -> 'DecoderConfig':
        # Đọc MTEF_MAX_DEPTH, MTEF_TEXT_ENCODING, MTEF_EXTENDED_RECORDS
        max_depth = MAX_NESTING_DEPTH
        gia_tri = os.getenv('MTEF_MAX_DEPTH', '').strip()
        if gia_tri:
            try:
                max_depth = int(gia_tri)
                if not 1 <= max_depth <= MAX_NESTING_LIMIT:
                    raise ValueError(gia_tri)
            except ValueError:
                logger.warning('MTEF_MAX_DEPTH=%r không hợp lệ, dùng mặc định %d',
                               gia_tri, MAX_NESTING_DEPTH)
                max_depth = MAX_NESTING_DEPTH

        text_encoding = os.getenv('MTEF_TEXT_ENCODING', '').strip() or DEFAULT_TEXT_ENCODING
        try:
            ''.encode(text_encoding)
        except LookupError:
            logger.warning('MTEF_TEXT_ENCODING=%r không tồn tại, dùng %s',
                           text_encoding, DEFAULT_TEXT_ENCODING)
            text_encoding = DEFAULT_TEXT_ENCODING

        values = {
            'max_depth': max_depth,
            'text_encoding': text_encoding,
            'extended_records': doc_bien_moi_truong_bool('MTEF_EXTENDED_RECORDS', False),
        }
        values.update(overrides)
        return cls(**values)

# TEMPLATE SELECTORS (MTEF 5)

class Selector(IntEnum):
    ANGLE = 0
    PAREN = 1
    BRACE = 2
    BRACK = 3
    BAR = 4
    DBAR = 5
    FLOOR = 6
    CEILING = 7
    OBRACK = 8
    INTERVAL = 9
    ROOT = 10
    FRACT = 11
    UBAR = 12
    OBAR = 13
    ARROW = 14
    INTEG = 15
    SUM = 16
    PROD = 17
    COPROD = 18
    UNION = 19
    INTER = 20
    INTOP = 21
    SUMOP = 22
    LIM = 23
    HBRACE = 24
    HBRACK = 25
    LDIV = 26
    SUB = 27
    SUP = 28
    SUBSUP = 29
    DIRAC = 30
    VEC = 31
    TILDE = 32
    HAT = 33
    ARC = 34
    JSTATUS = 35
    STRIKE = 36
    BOX = 37

# Template dạng chỉ số trên/dưới: slot dịch với cỡ SUB
SCRIPT_SELECTORS = (Selector.SUB, Selector.SUP, Selector.SUBSUP)

# BẢNG TRA LATEX
#
# Các bảng dưới đây là dữ liệu, có thể thay khi khởi tạo LatexTranslator.
# Macro shape: #1..#9 là slot, #S/#T là ký hiệu thứ nhất/thứ hai của template.

# Ký tự LaTeX cần escape trong math mode
LATEX_SPECIAL = {
    '%': r'\%', '&': r'\&', '#': r'\#', '_': r'\_', '$': r'\$',
    '{': r'\{', '}': r'\}', '\\': r'\backslash ', '~': r'\sim ', '^': r'\hat{}',
}

# MTCode (siêu tập Unicode) → LaTeX cho ký tự đặc biệt
MTCODE_TO_LATEX = {
    0x222B: r'\int',       # ∫
    0x222C: r'\iint',      # ∬
    0x222D: r'\iiint',     # ∭
    0x222E: r'\oint',      # ∮
    0x2211: r'\sum',       # ∑
    0x220F: r'\prod',      # ∏
    0x2210: r'\coprod',    # ∐
    0x22C3: r'\bigcup',    # ⋃
    0x22C2: r'\bigcap',    # ⋂
    0x222A: r'\cup',       # ∪
    0x2229: r'\cap',       # ∩
    0x2212: '-',           # − (minus sign)
    0x00B1: r'\pm',        # ±
    0x2213: r'\mp',        # ∓
    0x00D7: r'\times',     # ×
    0x00F7: r'\div',       # ÷
    0x2264: r'\leq',       # ≤
    0x2265: r'\geq',       # ≥
    0x2260: r'\neq',       # ≠
    0x2248: r'\approx',    # ≈
    0x2261: r'\equiv',     # ≡
    0x2245: r'\cong',      # ≅
    0x221D: r'\propto',    # ∝
    0x221E: r'\infty',     # ∞
    0x2202: r'\partial',   # ∂
    0x2207: r'\nabla',     # ∇
    0x2200: r'\forall',    # ∀
    0x2203: r'\exists',    # ∃
    0x2205: r'\emptyset',  # ∅
    0x2208: r'\in',        # ∈
    0x2209: r'\notin',     # ∉
    0x2282: r'\subset',    # ⊂
    0x2283: r'\supset',    # ⊃
    0x2286: r'\subseteq',  # ⊆
    0x2287: r'\supseteq',  # ⊇
    0x221A: r'\surd',      # √
    0x00B0: r'^\circ',     # °
    0x2032: r"'",          # ′
    0x03B1: r'\alpha',
    0x03B2: r'\beta',
    0x03B3: r'\gamma',
    0x03B4: r'\delta',
    0x03B5: r'\varepsilon',
    0x03B6: r'\zeta',
    0x03B7: r'\eta',
    0x03B8: r'\theta',
    0x03B9: r'\iota',
    0x03BA: r'\kappa',
    0x03BB: r'\lambda',
    0x03BC: r'\mu',
    0x03BD: r'\nu',
    0x03BE: r'\xi',
    0x03BF: 'o',
    0x03C0: r'\pi',
    0x03C1: r'\rho',
    0x03C2: r'\varsigma',
    0x03C3: r'\sigma',
    0x03C4: r'\tau',
    0x03C5: r'\upsilon',
    0x03C6: r'\varphi',
    0x03C7: r'\chi',
    0x03C8: r'\psi',
    0x03C9: r'\omega',
    0x03D1: r'\vartheta',
    0x03D5: r'\phi',
    0x03D6: r'\varpi',
    0x0393: r'\Gamma',
    0x0394: r'\Delta',
    0x0398: r'\Theta',
    0x039B: r'\Lambda',
    0x039E: r'\Xi',
    0x03A0: r'\Pi',
    0x03A3: r'\Sigma',
    0x03A5: r'\Upsilon',
    0x03A6: r'\Phi',
    0x03A8: r'\Psi',
    0x03A9: r'\Omega',
    0x2190: r'\leftarrow',
    0x2191: r'\uparrow',
    0x2192: r'\rightarrow',
    0x2193: r'\downarrow',
    0x2194: r'\leftrightarrow',
    0x21D0: r'\Leftarrow',
    0x21D2: r'\Rightarrow',
    0x21D4: r'\Leftrightarrow',
    0x22C5: r'\cdot',      # ⋅
    0x00B7: r'\cdot',      # ·
    0x2026: r'\ldots',     # …
    0x22EF: r'\cdots',     # ⋯
    0x22EE: r'\vdots',     # ⋮
    0x22F1: r'\ddots',     # ⋱
    0x27E8: r'\langle',    # ⟨
    0x27E9: r'\rangle',    # ⟩
    0x2329: r'\langle',
    0x232A: r'\rangle',
    0x230A: r'\lfloor',
    0x230B: r'\rfloor',
    0x2308: r'\lceil',
    0x2309: r'\rceil',
    0x2016: r'\|',         # ‖
    # Khoảng trắng
    0x0020: r'\ ',
    0x00A0: '~',
    0x2002: r'\enspace ',
    0x2003: r'\quad ',
    0x2004: r'\;',
    0x2005: r'\:',
    0x2009: r'\,',
    0x200A: r'\,',
    0x200B: '',
}

# Vị trí trong font Symbol (Adobe) → LaTeX, cho CHAR không có MTCode
SYMBOL_FONT_TO_LATEX = {
    0x61: r'\alpha', 0x62: r'\beta', 0x63: r'\chi', 0x64: r'\delta',
    0x65: r'\varepsilon', 0x66: r'\phi', 0x67: r'\gamma', 0x68: r'\eta',
    0x69: r'\iota', 0x6A: r'\varphi', 0x6B: r'\kappa', 0x6C: r'\lambda',
    0x6D: r'\mu', 0x6E: r'\nu', 0x6F: 'o', 0x70: r'\pi',
    0x71: r'\theta', 0x72: r'\rho', 0x73: r'\sigma', 0x74: r'\tau',
    0x75: r'\upsilon', 0x76: r'\varpi', 0x77: r'\omega', 0x78: r'\xi',
    0x79: r'\psi', 0x7A: r'\zeta',
    0x44: r'\Delta', 0x46: r'\Phi', 0x47: r'\Gamma', 0x4C: r'\Lambda',
    0x50: r'\Pi', 0x51: r'\Theta', 0x53: r'\Sigma', 0x55: r'\Upsilon',
    0x57: r'\Omega', 0x58: r'\Xi', 0x59: r'\Psi',
    0xA3: r'\leq', 0xA5: r'\infty', 0xB1: r'\pm', 0xB3: r'\geq',
    0xB4: r'\times', 0xB6: r'\partial', 0xB8: r'\div', 0xB9: r'\neq',
    0xBA: r'\equiv', 0xBB: r'\approx', 0xD1: r'\nabla', 0xD6: r'\surd',
    0xE5: r'\sum', 0xF2: r'\int', 0xAE: r'\rightarrow', 0xAC: r'\leftarrow',
}

# Bảng glyph theo (tên encoding, vị trí font)
FONT_POSITION_TO_LATEX = {
    ('Symbol', pos): glyph for pos, glyph in SYMBOL_FONT_TO_LATEX.items()
}


def _fence_shapes(selector, left, right):
    # tvFENCE_L = 1, tvFENCE_R = 2
    return {
        (selector, 3): r'\left' + left + ' #1' + r'\right' + right,
        (selector, 1): r'\left' + left + ' #1' + r'\right.',
        (selector, 2): r'\left. #1' + r'\right' + right,
        (selector, None): r'\left' + left + ' #1' + r'\right' + right,
    }


TEMPLATE_TO_LATEX = {}
TEMPLATE_TO_LATEX.update(_fence_shapes(Selector.ANGLE, r'\langle', r'\rangle'))
TEMPLATE_TO_LATEX.update(_fence_shapes(Selector.PAREN, '(', ')'))
TEMPLATE_TO_LATEX.update(_fence_shapes(Selector.BRACE, r'\{', r'\}'))
TEMPLATE_TO_LATEX.update(_fence_shapes(Selector.BRACK, '[', ']'))
TEMPLATE_TO_LATEX.update(_fence_shapes(Selector.BAR, '|', '|'))
TEMPLATE_TO_LATEX.update(_fence_shapes(Selector.DBAR, r'\|', r'\|'))
TEMPLATE_TO_LATEX.update(_fence_shapes(Selector.FLOOR, r'\lfloor', r'\rfloor'))
TEMPLATE_TO_LATEX.update(_fence_shapes(Selector.CEILING, r'\lceil', r'\rceil'))
TEMPLATE_TO_LATEX.update(_fence_shapes(Selector.OBRACK, ']', '['))
TEMPLATE_TO_LATEX.update({
    # Khoảng: ngoặc trái/phải nằm trong ký hiệu của template
    (Selector.INTERVAL, None): r'\left#S #1\right#T',
    # Căn: variation 0 = căn bậc hai, 1 = căn bậc n
    (Selector.ROOT, 0): r'\sqrt{#1}',
    (Selector.ROOT, 1): r'\sqrt[#2]{#1}',
    (Selector.ROOT, None): r'\sqrt{#1}',
    # Phân số: 1 = nhỏ, 2 = gạch chéo
    (Selector.FRACT, 0): r'\frac{#1}{#2}',
    (Selector.FRACT, 1): r'\tfrac{#1}{#2}',
    (Selector.FRACT, 2): r'{#1}/{#2}',
    (Selector.FRACT, 3): r'{#1}/{#2}',
    (Selector.FRACT, None): r'\frac{#1}{#2}',
    (Selector.UBAR, None): r'\underline{#1}',
    (Selector.OBAR, None): r'\overline{#1}',
    (Selector.ARROW, None): r'\xrightarrow[#2]{#1}',
    # Tích phân, tổng...: slot 1 = thân, 2 = cận dưới, 3 = cận trên
    (Selector.INTEG, None): r'#S_{#2}^{#3} #1',
    (Selector.SUM, None): r'#S_{#2}^{#3} #1',
    (Selector.PROD, None): r'#S_{#2}^{#3} #1',
    (Selector.COPROD, None): r'#S_{#2}^{#3} #1',
    (Selector.UNION, None): r'#S_{#2}^{#3} #1',
    (Selector.INTER, None): r'#S_{#2}^{#3} #1',
    (Selector.INTOP, None): r'#S_{#2}^{#3} #1',
    (Selector.SUMOP, None): r'#S_{#2}^{#3} #1',
    (Selector.LIM, None): r'\mathop{#1}\limits_{#2}^{#3}',
    # Ngoặc nhọn ngang: 1 = phía trên
    (Selector.HBRACE, 1): r'\overbrace{#1}^{#2}',
    (Selector.HBRACE, None): r'\underbrace{#1}_{#2}',
    (Selector.HBRACK, 1): r'\overbrace{#1}^{#2}',
    (Selector.HBRACK, None): r'\underbrace{#1}_{#2}',
    (Selector.LDIV, None): r'#2\overline{\smash{)}#1}',
    # Chỉ số: base là phần tử đứng trước trong line
    (Selector.SUB, None): r'_{#1}',
    (Selector.SUP, None): r'^{#2}',
    (Selector.SUBSUP, None): r'_{#1}^{#2}',
    (Selector.SUB, 1): r'{}_{#1}',
    (Selector.SUP, 1): r'{}^{#2}',
    (Selector.SUBSUP, 1): r'{}_{#1}^{#2}',
    # Dirac: 1 = bra, 2 = ket, 3 = cả hai
    (Selector.DIRAC, 1): r'\left\langle #1\right|',
    (Selector.DIRAC, 2): r'\left| #2\right\rangle',
    (Selector.DIRAC, None): r'\left\langle #1\middle| #2\right\rangle',
    (Selector.VEC, None): r'\overrightarrow{#1}',
    (Selector.TILDE, None): r'\widetilde{#1}',
    (Selector.HAT, None): r'\widehat{#1}',
    (Selector.ARC, None): r'\overset{\frown}{#1}',
    (Selector.JSTATUS, None): r'\left. #1\right|_{#2}',
    (Selector.STRIKE, None): r'\cancel{#1}',
    (Selector.BOX, None): r'\boxed{#1}',
})

# Embellishment (MTEF 5) → LaTeX, #1 là ký tự được trang trí
EMBELL_TO_LATEX = {
    2: r'\dot{#1}',
    3: r'\ddot{#1}',
    4: r'\dddot{#1}',
    5: r"#1'",
    6: r"#1''",
    7: r'{}^{\backprime}#1',
    8: r'\tilde{#1}',
    9: r'\hat{#1}',
    10: r'\not#1',
    11: r'\vec{#1}',
    12: r'\overleftarrow{#1}',
    13: r'\overleftrightarrow{#1}',
    14: r'\overrightarrow{#1}',
    15: r'\overleftarrow{#1}',
    16: r'\bar{#1}',
    17: r'\bar{#1}',
    18: r"#1'''",
    19: r'\overset{\frown}{#1}',
    20: r'\overset{\smile}{#1}',
    24: r'\ddddot{#1}',
    25: r'\underset{\cdot}{#1}',
    29: r'\underline{#1}',
    30: r'\utilde{#1}',
}

# Function name map (tên hàm toán học)
FUNC_NAME_MAP = {
    'sin': '\\sin', 'cos': '\\cos', 'tan': '\\tan',
    'sec': '\\sec', 'csc': '\\csc', 'cot': '\\cot',
    'sinh': '\\sinh', 'cosh': '\\cosh', 'tanh': '\\tanh',
    'ln': '\\ln', 'log': '\\log', 'exp': '\\exp',
    'lim': '\\lim', 'max': '\\max', 'min': '\\min',
    'sup': '\\sup', 'inf': '\\inf',
    'det': '\\det', 'dim': '\\dim', 'ker': '\\ker',
    'deg': '\\deg', 'gcd': '\\gcd', 'arg': '\\arg',
    'mod': '\\bmod',
}

# Căn lề PILE: 1 trái, 2 giữa, 3 phải, 4 theo dấu quan hệ, 5 theo dấu thập phân
PILE_ALIGN = {1: 'l', 2: 'c', 3: 'r', 4: 'c', 5: 'r'}

# Lệnh style khi marker đổi cỡ so với cỡ kế thừa của list
SIZE_STYLES = {
    Typesize.FULL: r'\textstyle',
    Typesize.SUB: r'\scriptstyle',
    Typesize.SUB2: r'\scriptscriptstyle',
    Typesize.SYM: r'\displaystyle',
    Typesize.SUBSYM: r'\scriptstyle',
}

# Ký hiệu mặc định (#S, #T) khi template không mang ký tự ký hiệu
TEMPLATE_SYMBOL_DEFAULTS = {
    Selector.INTERVAL: ('(', ')'),
    Selector.INTEG: (r'\int', ''),
    Selector.SUM: (r'\sum', ''),
    Selector.PROD: (r'\prod', ''),
    Selector.COPROD: (r'\coprod', ''),
    Selector.UNION: (r'\bigcup', ''),
    Selector.INTER: (r'\bigcap', ''),
    Selector.INTOP: (r'\int', ''),
    Selector.SUMOP: (r'\sum', ''),
}

# Chuỗi thay cho node không dịch được khi on_unresolved="placeholder"
UNRESOLVED_PLACEHOLDER = r'\boxed{?}'
