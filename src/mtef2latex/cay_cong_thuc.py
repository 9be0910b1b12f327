# cay_cong_thuc.py - Dựng cây công thức từ stream MTEF
#
# Header: mtef_version, platform, product, version, version_sub (mỗi trường 1 byte),
#         tên ứng dụng kết thúc NUL, 1 byte inline flag.
# Sau header là dãy record; object list gốc kết thúc ở END hoặc khi hết buffer.

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from mtef2latex.ban_ghi import (
    END, EquationPreferences, EncodingDef, FontDef, FontStyleDef, ColorDef, Node, Ruler,
)
from mtef2latex.bang_dinh_nghia import DefinitionTables
from mtef2latex.bo_giai_ma import RecordDecoder
from mtef2latex.con_tro import ByteCursor
from mtef2latex.config import DecoderConfig, RecordType
from mtef2latex.giai_ma import decode_string
from mtef2latex.loi import MalformedBufferError, NestingOverflowError

logger = logging.getLogger("mtef2latex.cay_cong_thuc")

_DEFINITION_TYPES = (EncodingDef, FontDef, FontStyleDef, ColorDef)


@dataclass(frozen=True)
class EquationHeader:
    mtef_version: int
    platform: int
    product: int
    version: int
    version_sub: int
    application: str
    inline_flag: int

    @classmethod
    def parse(cls, cursor: ByteCursor, encoding: str) -> 'EquationHeader':
        return cls(
            mtef_version=cursor.read_u8('header.mtef_version'),
            platform=cursor.read_u8('header.platform'),
            product=cursor.read_u8('header.product'),
            version=cursor.read_u8('header.version'),
            version_sub=cursor.read_u8('header.version_sub'),
            application=decode_string(cursor, encoding, 'header.application'),
            inline_flag=cursor.read_u8('header.inline'),
        )

    def encode(self, encoding: str = 'latin-1') -> bytes:
        # Chiều ngược của parse, chỉ dành cho header
        return (bytes([self.mtef_version, self.platform, self.product,
                       self.version, self.version_sub])
                + self.application.encode(encoding) + b'\x00'
                + bytes([self.inline_flag]))


@dataclass(frozen=True)
class EquationDocument:
    header: EquationHeader
    tables: DefinitionTables
    objects: Tuple[Node, ...]
    preferences: Optional[EquationPreferences] = None

    @property
    def mtef_version(self) -> int:
        return self.header.mtef_version

    @property
    def platform(self) -> int:
        return self.header.platform

    @property
    def product(self) -> int:
        return self.header.product

    @property
    def version(self) -> int:
        return self.header.version

    @property
    def version_sub(self) -> int:
        return self.header.version_sub

    @property
    def application(self) -> str:
        return self.header.application

    @property
    def is_inline(self) -> bool:
        return bool(self.header.inline_flag)


class _DecodeSession:
    # Trạng thái của đúng một lần giải mã: con trỏ, bảng định nghĩa, EQN_PREFS cuối

    def __init__(self, data: bytes, config: DecoderConfig):
        self.config = config
        self.cursor = ByteCursor(data)
        self.tables = DefinitionTables(trace=config.trace)
        self.preferences: Optional[EquationPreferences] = None
        self.deepest = 0
        self.decoder = RecordDecoder(config, self.read_object_list)

    def _trace(self, event: str, **fields):
        if self.config.trace is not None:
            self.config.trace(event, **fields)

    def run(self) -> EquationDocument:
        header = EquationHeader.parse(self.cursor, self.config.text_encoding)
        logger.debug('Header MTEF v%d, ứng dụng %r, inline=%d',
                     header.mtef_version, header.application, header.inline_flag)
        self._trace('header', header=header)

        objects = self._read_root_list()
        if not self.cursor.at_end():
            logger.debug('Bỏ qua %d byte sau END gốc', self.cursor.remaining)

        return EquationDocument(
            header=header,
            tables=self.tables.freeze(),
            objects=objects,
            preferences=self.preferences,
        )

    def _decode_next(self, depth: int):
        offset = self.cursor.pos
        tag = self.cursor.read_u8('tag')
        record = self.decoder.decode(tag, self.cursor, depth)
        logger.debug('Record tag=%d offset=0x%04X depth=%d: %s',
                     tag, offset, depth, type(record).__name__)
        self._trace('record', tag=tag, offset=offset, depth=depth, record=record)
        return record

    def _collect(self, record, nodes: List[Node]):
        # Record định nghĩa đi vào bảng, Node đi vào object list
        if isinstance(record, _DEFINITION_TYPES):
            self.tables.add(record)
        elif isinstance(record, EquationPreferences):
            self.preferences = record
        elif isinstance(record, Ruler):
            logger.debug('RULER đứng riêng ngoài LINE/PILE, bỏ qua')
        else:
            nodes.append(record)

    def _read_root_list(self) -> Tuple[Node, ...]:
        nodes: List[Node] = []
        while not self.cursor.at_end():
            record = self._decode_next(0)
            if record is END:
                break
            self._collect(record, nodes)
        return tuple(nodes)

    def read_object_list(self, cursor: ByteCursor, depth: int, owner_tag: int) -> Tuple[Node, ...]:
        # Đọc một object list lồng cho tới END của chính nó
        start = cursor.pos
        self.deepest = max(self.deepest, depth)
        if depth > self.config.max_depth:
            raise NestingOverflowError(depth, self.config.max_depth, offset=start, tag=owner_tag)

        nodes: List[Node] = []
        while True:
            if cursor.at_end():
                raise MalformedBufferError(
                    f'object list của {RecordType(owner_tag).name} chưa đóng khi hết buffer',
                    offset=start, tag=owner_tag, field='object_list',
                )
            record = self._decode_next(depth)
            if record is END:
                return tuple(nodes)
            self._collect(record, nodes)


class TreeBuilder:
    """Giải mã một stream MTEF (bắt đầu từ header) thành EquationDocument.

    Một TreeBuilder dùng lại được cho nhiều buffer, kể cả từ nhiều thread:
    mỗi lần build() có trạng thái riêng.
    """

    def __init__(self, config: Optional[DecoderConfig] = None):
        self.config = config or DecoderConfig()

    def build(self, data: bytes) -> EquationDocument:
        session = _DecodeSession(data, self.config)
        try:
            return session.run()
        except RecursionError:
            # Stack Python cạn trước max_depth (recursion limit bị hạ thấp)
            raise NestingOverflowError(
                session.deepest, self.config.max_depth, offset=session.cursor.pos,
            ) from None


def decode_mtef(data: bytes, config: Optional[DecoderConfig] = None) -> EquationDocument:
    return TreeBuilder(config).build(data)


__all__ = [
    'EquationHeader',
    'EquationDocument',
    'TreeBuilder',
    'decode_mtef',
]
