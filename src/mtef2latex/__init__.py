# mtef2latex - Giải mã MTEF (MathType Equation Format) và chuyển sang LaTeX

from mtef2latex.ban_ghi import (
    Character, ColorChange, ColorDef, Embellishment, EncodingDef, EquationPreferences,
    FontDef, FontStyleDef, FutureRecord, Line, Matrix, Pile, Ruler, SizeChange,
    SizeMarker, StyleOverride, TabStop, Template,
)
from mtef2latex.bang_dinh_nghia import DefinitionTables
from mtef2latex.cay_cong_thuc import EquationDocument, EquationHeader, TreeBuilder, decode_mtef
from mtef2latex.chuyen_latex import LatexTranslator
from mtef2latex.con_tro import ByteCursor
from mtef2latex.config import DecoderConfig, RecordType, Selector, Typeface, Typesize
from mtef2latex.giai_ma import Dimension, Nudge
from mtef2latex.loi import (
    DecodeError, MalformedBufferError, MtefError, NestingOverflowError, OleContainerError,
    TranslationError, UnhandledTagError, UnresolvedIndexError, UnresolvedLookupError,
    UnsupportedRecordError,
)
from mtef2latex.xu_ly_ole_equation import (
    EqnOleFileHeader, document_to_latex, extract_mtef_from_ole, iter_docx_equations,
    mtef_to_latex, ole_equation_to_latex,
)

__version__ = '0.1.0'
