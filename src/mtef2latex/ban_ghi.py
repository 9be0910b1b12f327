# ban_ghi.py - Kiểu dữ liệu cho record MTEF và cây công thức
#
# Node (nằm trong object list): Line, Character, Template, Pile, Matrix, Embellishment,
#   SizeMarker, SizeChange, ColorChange, FutureRecord
# Record định nghĩa (đi vào bảng, không nằm trong object list):
#   EncodingDef, FontDef, FontStyleDef, ColorDef, EquationPreferences
# Mọi kiểu đều bất biến; object list con là tuple thuộc sở hữu của node cha.

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from mtef2latex.config import (
    RecordOptions, RecordType, Typeface, Typesize, MARKER_TYPESIZE,
)
from mtef2latex.giai_ma import Dimension, Nudge

# EQUATION STRUCTURE


@dataclass(frozen=True)
class TabStop:
    stop_type: int
    offset: int


@dataclass(frozen=True)
class Ruler:
    stops: Tuple[TabStop, ...] = ()


@dataclass(frozen=True)
class Line:
    objects: Tuple['Node', ...] = ()
    options: RecordOptions = RecordOptions(0)
    nudge: Optional[Nudge] = None
    line_spacing: Optional[int] = None
    ruler: Optional[Ruler] = None

    @property
    def null(self) -> bool:
        # Line placeholder: không hiển thị, không có object list
        return self.options.line_null


@dataclass(frozen=True)
class Embellishment:
    embell_type: int
    options: RecordOptions = RecordOptions(0)
    nudge: Optional[Nudge] = None


@dataclass(frozen=True)
class Character:
    # typeface đã bỏ độ lệch 128: dương = style MathType, âm = chỉ số font tường minh
    typeface: int
    mtcode: Optional[int] = None
    font_position_8: Optional[int] = None
    font_position_16: Optional[int] = None
    options: RecordOptions = RecordOptions(0)
    nudge: Optional[Nudge] = None
    embellishments: Tuple[Embellishment, ...] = ()

    @property
    def style(self) -> Optional[Typeface]:
        try:
            return Typeface(self.typeface)
        except ValueError:
            return None

    @property
    def typeface_name(self) -> str:
        style = self.style
        if style is not None:
            return style.name.lower()
        if self.typeface < 0:
            return f'font{self.font_index}'
        return f'typeface{self.typeface}'

    @property
    def font_index(self) -> Optional[int]:
        # typeface -n trỏ tới FONT_DEF thứ n (chỉ số bảng n - 1)
        if self.typeface < 0:
            return -self.typeface - 1
        return None

    @property
    def font_position(self) -> Optional[int]:
        if self.font_position_16 is not None:
            return self.font_position_16
        return self.font_position_8

    @property
    def function_start(self) -> bool:
        return self.options.char_func_start


@dataclass(frozen=True)
class Template:
    selector: int
    variation: int
    template_options: int = 0
    children: Tuple['Node', ...] = ()
    options: RecordOptions = RecordOptions(0)
    nudge: Optional[Nudge] = None

    @property
    def slots(self) -> Tuple[Tuple['Node', ...], ...]:
        # Slot là các LINE/PILE con; LINE trải ra thành object list của nó
        result = []
        for child in self.children:
            if isinstance(child, Line):
                result.append(child.objects)
            elif isinstance(child, Pile):
                result.append((child,))
        return tuple(result)

    @property
    def symbols(self) -> Tuple['Node', ...]:
        # Ký tự ngoặc, ký hiệu toán tử lớn... nằm cạnh các slot
        return tuple(c for c in self.children if not isinstance(c, (Line, Pile)))


@dataclass(frozen=True)
class Pile:
    halign: int
    valign: int
    lines: Tuple['Node', ...] = ()
    options: RecordOptions = RecordOptions(0)
    nudge: Optional[Nudge] = None
    ruler: Optional[Ruler] = None


@dataclass(frozen=True)
class Matrix:
    valign: int
    h_just: int
    v_just: int
    rows: int
    cols: int
    row_parts: bytes = b''
    col_parts: bytes = b''
    cells: Tuple['Node', ...] = ()
    options: RecordOptions = RecordOptions(0)
    nudge: Optional[Nudge] = None

    def row(self, index: int) -> Tuple['Node', ...]:
        start = index * self.cols
        return self.cells[start:start + self.cols]


@dataclass(frozen=True)
class SizeMarker:
    tag: RecordType

    @property
    def typesize(self) -> Typesize:
        return MARKER_TYPESIZE[self.tag]


@dataclass(frozen=True)
class SizeChange:
    # SIZE tổng quát: hoặc point_size (1/32 pt), hoặc lsize + delta
    lsize: Optional[int] = None
    delta: Optional[int] = None
    point_size: Optional[int] = None


@dataclass(frozen=True)
class ColorChange:
    color_index: int


@dataclass(frozen=True)
class FutureRecord:
    tag: int
    payload: bytes = b''


Node = Union[Line, Character, Template, Pile, Matrix, Embellishment,
             SizeMarker, SizeChange, ColorChange, FutureRecord]

# DEFINITIONS


@dataclass(frozen=True)
class EncodingDef:
    name: str


@dataclass(frozen=True)
class FontDef:
    encoding_index: int
    name: str


@dataclass(frozen=True)
class FontStyleDef:
    font_index: int
    char_style: int


@dataclass(frozen=True)
class ColorDef:
    options: RecordOptions
    values: Tuple[int, ...]
    name: Optional[str] = None

    @property
    def model(self) -> str:
        return 'cmyk' if self.options.color_cmyk else 'rgb'

    @property
    def spot(self) -> bool:
        return self.options.color_spot


@dataclass(frozen=True)
class StyleOverride:
    font_def_index: int
    char_style: int


@dataclass(frozen=True)
class EquationPreferences:
    options: int
    sizes: Tuple[Dimension, ...] = ()
    spaces: Tuple[Dimension, ...] = ()
    styles: Tuple[Optional[StyleOverride], ...] = field(default_factory=tuple)


Definition = Union[EncodingDef, FontDef, FontStyleDef, ColorDef, EquationPreferences]


class EndRecord:
    # Record END: đóng object list đang mở

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return 'END'


END = EndRecord()
