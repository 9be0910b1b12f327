# utils.py - Tiện ích chuỗi LaTeX: escape ký tự, nối mảnh, dọn dẹp kết quả

import re
from typing import Iterable

_LENH_CUOI = re.compile(r'\\[A-Za-z]+$')
_KHOANG_TRANG = re.compile(r'\s+')
_CHI_SO_RONG = re.compile(r'[_^]\{\}')
_MATHRM_DON = re.compile(r'\\mathrm\{([()[\]|,;:.!?])\}')


def loc_ky_tu(text: str) -> str:
    # Escape các ký tự đặc biệt LaTeX (\, %, $, _, &, #, {, }, ~, ^) trong text mode
    if not text:
        return ""
    ky_tu_dac_biet = [
        ('\\', r'\textbackslash{}'),
        ('%', r'\%'),
        ('$', r'\$'),
        ('_', r'\_'),
        ('&', r'\&'),
        ('#', r'\#'),
        ('{', r'\{'),
        ('}', r'\}'),
        ('~', r'\textasciitilde{}'),
        ('^', r'\textasciicircum{}'),
    ]
    ket_qua = []
    for ky_tu in text:
        for goc, thay_the in ky_tu_dac_biet:
            if ky_tu == goc:
                ket_qua.append(thay_the)
                break
        else:
            ket_qua.append(ky_tu)
    return ''.join(ket_qua)


def noi_latex(manh: Iterable[str]) -> str:
    # Nối các mảnh LaTeX; chèn dấu cách khi lệnh (\alpha) đứng ngay trước chữ cái
    ket_qua = ''
    for m in manh:
        if not m:
            continue
        if ket_qua and m[0].isalpha() and _LENH_CUOI.search(ket_qua):
            ket_qua += ' '
        ket_qua += m
    return ket_qua


def don_dep_latex(latex: str) -> str:
    # Dọn chuỗi kết quả cuối cùng
    # Bỏ khoảng trắng thừa
    latex = _KHOANG_TRANG.sub(' ', latex).strip()
    # Bỏ chỉ số rỗng: \int_{}^{} x → \int x
    trong_lap = None
    while trong_lap != latex:
        trong_lap = latex
        latex = _CHI_SO_RONG.sub('', latex)
    # Bỏ \mathrm{} bao đơn dấu câu, VD: \mathrm{(} → (
    latex = _MATHRM_DON.sub(r'\1', latex)
    return latex
