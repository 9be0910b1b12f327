# loi.py - Các lớp lỗi cho bộ giải mã MTEF và bộ chuyển LaTeX
#
# Phân cấp:
#   MtefError
#   ├── DecodeError (có offset, tag, field)
#   │   ├── MalformedBufferError   – đọc vượt buffer, giá trị kích thước sai
#   │   ├── UnhandledTagError      – tag không có ngữ pháp
#   │   │   └── UnsupportedRecordError – tag đã biết nhưng chưa bật ngữ pháp
#   │   └── NestingOverflowError   – lồng quá sâu
#   ├── UnresolvedIndexError      – chỉ số bảng định nghĩa không tồn tại
#   ├── TranslationError
#   │   └── UnresolvedLookupError  – không có glyph/macro cho khóa
#   └── OleContainerError         – OLE không có stream "Equation Native"

from typing import Any, Optional


class MtefError(Exception):
    # Lớp gốc cho mọi lỗi của mtef2latex
    pass


class DecodeError(MtefError):

    def __init__(self, message: str, offset: Optional[int] = None,
                 tag: Optional[int] = None, field: Optional[str] = None):
        self.offset = offset
        self.tag = tag
        self.field = field
        self.reason = message
        super().__init__(self._format(message))

    def _format(self, message):
        parts = [message]
        if self.tag is not None:
            parts.append(f'tag={self.tag}')
        if self.field:
            parts.append(f'field={self.field}')
        if self.offset is not None:
            parts.append(f'offset=0x{self.offset:04X}')
        return ' | '.join(parts)

    def to_dict(self) -> dict:
        # Dạng JSON cho backend
        return {
            'error': self.reason,
            'loai': type(self).__name__,
            'offset': self.offset,
            'tag': self.tag,
            'field': self.field,
        }


class MalformedBufferError(DecodeError):
    pass


class UnhandledTagError(DecodeError):
    pass


class UnsupportedRecordError(UnhandledTagError):
    pass


class NestingOverflowError(DecodeError):

    def __init__(self, depth: int, max_depth: int, offset=None, tag=None):
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(
            f'object list nesting {depth} exceeds limit {max_depth}',
            offset=offset, tag=tag, field='object_list',
        )


class UnresolvedIndexError(MtefError):

    def __init__(self, table: str, index: int, size: int, node: Any = None):
        self.table = table
        self.index = index
        self.size = size
        # Node đang dịch khi tra bảng, None nếu lỗi xảy ra ngoài bộ dịch
        self.node = node
        super().__init__(f'{table} table has no entry {index} (size {size})')


class TranslationError(MtefError):

    def __init__(self, message: str, node: Any = None):
        self.node = node
        super().__init__(message)


class UnresolvedLookupError(TranslationError):

    def __init__(self, kind: str, key: Any, node: Any = None):
        self.kind = kind
        self.key = key
        super().__init__(f'no {kind} mapping for {key!r}', node=node)


class OleContainerError(MtefError):
    pass


__all__ = [
    'MtefError',
    'DecodeError',
    'MalformedBufferError',
    'UnhandledTagError',
    'UnsupportedRecordError',
    'NestingOverflowError',
    'UnresolvedIndexError',
    'TranslationError',
    'UnresolvedLookupError',
    'OleContainerError',
]
