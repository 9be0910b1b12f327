# xu_ly_ole_equation.py - Chuyển OLE Equation (MathType / Equation Editor) → LaTeX
#
# Pipeline:
#   1. Trích "Equation Native" stream từ OLE Compound File
#   2. Bỏ header OLE 28 byte, cắt đúng phần MTEF
#   3. Giải mã MTEF → EquationDocument
#   4. Dịch cây → LaTeX, dọn dẹp chuỗi kết quả
#
# Cách dùng:
#   latex = ole_equation_to_latex(ole_binary_bytes)

import io
import logging
import zipfile
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import olefile

from mtef2latex.cay_cong_thuc import EquationDocument, decode_mtef
from mtef2latex.chuyen_latex import LatexTranslator
from mtef2latex.con_tro import ByteCursor
from mtef2latex.config import DecoderConfig
from mtef2latex.loi import MalformedBufferError, OleContainerError
from mtef2latex.utils import don_dep_latex

logger = logging.getLogger("mtef2latex.xu_ly_ole_equation")

EQUATION_STREAM = 'Equation Native'
OLE_HEADER_SIZE = 28
DOCX_EMBEDDINGS = 'word/embeddings/'


@dataclass(frozen=True)
class EqnOleFileHeader:
    # Header đứng trước MTEF trong stream "Equation Native"
    cb_hdr: int
    version: int
    cf: int
    size: int
    reserved: Tuple[int, int, int, int]

    @classmethod
    def parse(cls, buf: bytes) -> 'EqnOleFileHeader':
        cursor = ByteCursor(buf)
        try:
            header = cls(
                cb_hdr=cursor.read_u16('ole.cb_hdr'),
                version=cursor.read_u32('ole.version'),
                cf=cursor.read_u16('ole.cf'),
                size=cursor.read_u32('ole.size'),
                reserved=tuple(cursor.read_u32('ole.reserved') for _ in range(4)),
            )
        except MalformedBufferError as loi:
            raise OleContainerError(f'header OLE bị cắt: {loi}') from loi

        if header.cb_hdr < OLE_HEADER_SIZE:
            raise OleContainerError(f'cb_hdr={header.cb_hdr} nhỏ hơn {OLE_HEADER_SIZE}')
        if len(buf) < header.cb_hdr + header.size:
            raise OleContainerError(
                f'stream {len(buf)} byte ngắn hơn header + MTEF ({header.cb_hdr} + {header.size})'
            )
        return header

    def mtef_slice(self, buf: bytes) -> bytes:
        return buf[self.cb_hdr:self.cb_hdr + self.size]


def extract_mtef_from_ole(ole_binary: bytes) -> bytes:
    # Trích xuất MTEF data từ OLE Compound File
    # ole_binary = nội dung file oleObjectN.bin từ DOCX
    try:
        ole = olefile.OleFileIO(io.BytesIO(ole_binary))
    except OSError as loi:
        raise OleContainerError(f'không mở được OLE Compound File: {loi}') from loi

    try:
        if not ole.exists(EQUATION_STREAM):
            raise OleContainerError(f'OLE không có stream "{EQUATION_STREAM}"')
        eq_data = ole.openstream(EQUATION_STREAM).read()
    finally:
        ole.close()

    header = EqnOleFileHeader.parse(eq_data)
    logger.debug('Equation Native: cb_hdr=%d, MTEF %d byte', header.cb_hdr, header.size)
    return header.mtef_slice(eq_data)


def mtef_to_latex(mtef_data: bytes, config: Optional[DecoderConfig] = None,
                  translator: Optional[LatexTranslator] = None) -> str:
    document = decode_mtef(mtef_data, config)
    return document_to_latex(document, translator)


def document_to_latex(document: EquationDocument,
                      translator: Optional[LatexTranslator] = None) -> str:
    translator = translator or LatexTranslator()
    return don_dep_latex(translator.translate(document))


def ole_equation_to_latex(ole_binary: bytes, config: Optional[DecoderConfig] = None,
                          translator: Optional[LatexTranslator] = None) -> str:
    # Hàm chính: OLE binary → LaTeX math string
    return mtef_to_latex(extract_mtef_from_ole(ole_binary), config, translator)


def iter_docx_equations(docx_bytes: bytes) -> Iterator[Tuple[str, bytes]]:
    # Duyệt các OLE object nhúng trong .docx: (tên member, nội dung .bin)
    try:
        zin = zipfile.ZipFile(io.BytesIO(docx_bytes), 'r')
    except zipfile.BadZipFile as loi:
        raise OleContainerError(f'file không phải .docx hợp lệ: {loi}') from loi

    with zin:
        for name in sorted(zin.namelist()):
            if name.startswith(DOCX_EMBEDDINGS) and name.lower().endswith('.bin'):
                yield name, zin.read(name)


__all__ = [
    'EqnOleFileHeader',
    'extract_mtef_from_ole',
    'mtef_to_latex',
    'document_to_latex',
    'ole_equation_to_latex',
    'iter_docx_equations',
]
