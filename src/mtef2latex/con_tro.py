# con_tro.py - Con trỏ đọc tuần tự trên buffer byte bất biến
#
# Mọi thao tác đọc hoặc thành công và tiến vị trí, hoặc ném MalformedBufferError;
# con trỏ không bao giờ đọc quá cuối buffer.

import struct

from mtef2latex.loi import MalformedBufferError

_U16 = struct.Struct('<H')
_I16 = struct.Struct('<h')
_U32 = struct.Struct('<I')


class ByteCursor:

    def __init__(self, data: bytes, start: int = 0, end: int = None):
        self._data = bytes(data)
        self._end = len(self._data) if end is None else end
        if not 0 <= start <= self._end <= len(self._data):
            raise ValueError(f'khoảng [{start}, {end}) nằm ngoài buffer {len(self._data)} byte')
        self.pos = start

    @property
    def remaining(self) -> int:
        return self._end - self.pos

    def at_end(self) -> bool:
        return self.pos >= self._end

    def _require(self, count: int, field: str):
        if count < 0 or self.pos + count > self._end:
            raise MalformedBufferError(
                f'cần {count} byte nhưng chỉ còn {self.remaining}',
                offset=self.pos, field=field,
            )

    def peek_u8(self, field: str = 'u8') -> int:
        self._require(1, field)
        return self._data[self.pos]

    def read_u8(self, field: str = 'u8') -> int:
        self._require(1, field)
        b = self._data[self.pos]
        self.pos += 1
        return b

    def read_i8(self, field: str = 'i8') -> int:
        b = self.read_u8(field)
        return b - 256 if b > 127 else b

    def read_u16(self, field: str = 'u16') -> int:
        self._require(2, field)
        value = _U16.unpack_from(self._data, self.pos)[0]
        self.pos += 2
        return value

    def read_i16(self, field: str = 'i16') -> int:
        self._require(2, field)
        value = _I16.unpack_from(self._data, self.pos)[0]
        self.pos += 2
        return value

    def read_u32(self, field: str = 'u32') -> int:
        self._require(4, field)
        value = _U32.unpack_from(self._data, self.pos)[0]
        self.pos += 4
        return value

    def read_bytes(self, count: int, field: str = 'bytes') -> bytes:
        self._require(count, field)
        chunk = self._data[self.pos:self.pos + count]
        self.pos += count
        return chunk

    def read_until_nul(self, field: str = 'string') -> bytes:
        # Trả về các byte trước NUL; NUL bị tiêu thụ nhưng không nằm trong kết quả
        nul = self._data.find(b'\x00', self.pos, self._end)
        if nul < 0:
            raise MalformedBufferError(
                'chuỗi không có NUL kết thúc trước cuối buffer',
                offset=self.pos, field=field,
            )
        chunk = self._data[self.pos:nul]
        self.pos = nul + 1
        return chunk

    def __repr__(self):
        return f'ByteCursor(pos={self.pos}, end={self._end})'
