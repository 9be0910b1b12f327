# giai_ma.py - Các hàm giải mã cơ sở dựng trên ByteCursor
#
#   decode_nudge             – độ lệch (dx, dy), 2 byte hoặc 2 byte sentinel + 4 byte
#   decode_variation         – variation của template, 1 hoặc 2 byte (bit cao = còn byte)
#   decode_unsigned          – số nguyên không dấu MTEF, 1 byte hoặc 0xFF + 16-bit
#   decode_dimension_array   – mảng kích thước đóng gói theo nibble (EQN_PREFS)
#   decode_string            – chuỗi kết thúc NUL với encoding chọn được

from dataclasses import dataclass
from typing import List

from mtef2latex.con_tro import ByteCursor
from mtef2latex.config import (
    NUDGE_SENTINEL, DIMENSION_UNITS, DIMENSION_DIGITS, DIMENSION_END,
)
from mtef2latex.loi import MalformedBufferError


@dataclass(frozen=True)
class Nudge:
    dx: int
    dy: int


@dataclass(frozen=True)
class Dimension:
    # Giá trị kích thước: chuỗi số (có thể có '.' và '-') + đơn vị
    literal: str
    unit: str

    @property
    def value(self) -> float:
        return float(self.literal)

    def __str__(self):
        return f'{self.literal}{self.unit}'


def decode_nudge(cursor: ByteCursor) -> Nudge:
    # Dạng ngắn: mỗi tọa độ 1 byte lệch 128.
    # Nếu một trong hai byte là 128 thì theo sau là dx, dy dạng int16.
    start = cursor.pos
    small_dx = cursor.read_u8('nudge.dx')
    small_dy = cursor.read_u8('nudge.dy')
    if small_dx == NUDGE_SENTINEL or small_dy == NUDGE_SENTINEL:
        try:
            dx = cursor.read_i16('nudge.dx16')
            dy = cursor.read_i16('nudge.dy16')
        except MalformedBufferError as loi:
            raise MalformedBufferError(
                'nudge dạng mở rộng bị cắt', offset=start, field=loi.field,
            ) from loi
        return Nudge(dx, dy)
    return Nudge(small_dx - NUDGE_SENTINEL, small_dy - NUDGE_SENTINEL)


def decode_variation(cursor: ByteCursor) -> int:
    # Variation 2 byte nếu bit 7 của byte đầu được set
    byte1 = cursor.read_u8('variation')
    if byte1 & 0x80:
        byte2 = cursor.read_u8('variation.hi')
        return (byte1 & 0x7F) | (byte2 << 8)
    return byte1


def decode_unsigned(cursor: ByteCursor, field: str = 'unsigned') -> int:
    value = cursor.read_u8(field)
    if value == 0xFF:
        return cursor.read_u16(field)
    return value


def decode_dimension_array(cursor: ByteCursor, count: int, field: str = 'dimensions') -> List[Dimension]:
    # Mỗi giá trị: nibble đơn vị, các nibble chữ số, rồi 0xF.
    # Các giá trị nối tiếp nhau trong dòng nibble; mảng kết thúc ở ranh giới byte.
    values = []
    unit = None
    literal = ''
    while len(values) < count:
        offset = cursor.pos
        byte = cursor.read_u8(field)
        for nibble in ((byte >> 4) & 0x0F, byte & 0x0F):
            if len(values) >= count:
                # Nibble đệm sau giá trị cuối
                break
            if unit is None:
                if nibble not in DIMENSION_UNITS:
                    raise MalformedBufferError(
                        f'nibble đơn vị không hợp lệ 0x{nibble:X}', offset=offset, field=field,
                    )
                unit = DIMENSION_UNITS[nibble]
            elif nibble == DIMENSION_END:
                if not literal:
                    raise MalformedBufferError(
                        'giá trị kích thước rỗng', offset=offset, field=field,
                    )
                values.append(Dimension(literal, unit))
                unit = None
                literal = ''
            elif nibble in DIMENSION_DIGITS:
                literal += DIMENSION_DIGITS[nibble]
            else:
                raise MalformedBufferError(
                    f'nibble chữ số không hợp lệ 0x{nibble:X}', offset=offset, field=field,
                )
    return values


def decode_string(cursor: ByteCursor, encoding: str, field: str = 'string') -> str:
    offset = cursor.pos
    raw = cursor.read_until_nul(field)
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as loi:
        raise MalformedBufferError(
            f'chuỗi không giải mã được bằng {encoding}: {loi.reason}',
            offset=offset, field=field,
        ) from loi


__all__ = [
    'Nudge',
    'Dimension',
    'decode_nudge',
    'decode_variation',
    'decode_unsigned',
    'decode_dimension_array',
    'decode_string',
]
