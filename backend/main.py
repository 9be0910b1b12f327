import os
import sys
import logging
from pathlib import Path
from datetime import datetime

from fastapi import FastAPI, File, UploadFile, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mtef2latex import (
    DecoderConfig, LatexTranslator, MtefError, DecodeError, UnresolvedIndexError,
    decode_mtef, document_to_latex, extract_mtef_from_ole, iter_docx_equations,
)
from mtef2latex.config import doc_bien_moi_truong_bool

logging.basicConfig(
    level=os.getenv('LOG_LEVEL', 'INFO').strip().upper() or 'INFO',
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger("mtef2latex.backend")

# Khởi tạo FastAPI app
app = FastAPI(title="MTEF2LaTeX API", version="0.1.0")

# Cấu hình CORS - cho phép frontend truy cập (hỗ trợ nhiều port)
cors_allow_all = os.getenv('CORS_ALLOW_ALL', '0').strip() == '1'
cors_origins_raw = os.getenv('CORS_ORIGINS', '').strip()
cors_origins = [o.strip() for o in cors_origins_raw.split(',') if o.strip()]
if not cors_origins:
    cors_origins = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://localhost:5173",
    ]

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if cors_allow_all else cors_origins,
    allow_credentials=False if cors_allow_all else True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def in_log_loi(thong_diep: str, loi: Exception = None):
    # Ghi log lỗi để developer dễ debug
    if loi is not None:
        logger.warning("%s: %s", thong_diep, loi)
    else:
        logger.warning("%s", thong_diep)


def doc_gioi_han_upload() -> int:
    # Giới hạn kích thước upload (byte), đọc từ MAX_UPLOAD_MB
    try:
        so_mb = int(os.getenv('MAX_UPLOAD_MB', '10').strip() or '10')
        if so_mb < 1:
            raise ValueError(so_mb)
    except ValueError as loi:
        in_log_loi('Giá trị MAX_UPLOAD_MB không hợp lệ, dùng mặc định 10MB', loi)
        so_mb = 10
    return so_mb * 1024 * 1024


def tao_cau_hinh_giai_ma() -> DecoderConfig:
    # Backend bật ngữ pháp PILE/MATRIX/... trừ khi MTEF_EXTENDED_RECORDS=0
    mo_rong = doc_bien_moi_truong_bool('MTEF_EXTENDED_RECORDS', True)
    return DecoderConfig.from_env(extended_records=mo_rong)


GIOI_HAN_UPLOAD = doc_gioi_han_upload()
CAU_HINH_GIAI_MA = tao_cau_hinh_giai_ma()


def loi_thanh_dict(loi: MtefError) -> dict:
    # Chuyển lỗi mtef2latex thành JSON trả về client
    if isinstance(loi, DecodeError):
        return loi.to_dict()
    noi_dung = {"error": str(loi), "loai": type(loi).__name__}
    if isinstance(loi, UnresolvedIndexError):
        noi_dung["bang"] = loi.table
        noi_dung["chi_so"] = loi.index
    return noi_dung


@app.exception_handler(MtefError)
async def xu_ly_loi_mtef(request: Request, loi: MtefError):
    in_log_loi(f"Lỗi xử lý {request.url.path}", loi)
    return JSONResponse(status_code=400, content=loi_thanh_dict(loi))


async def doc_file_upload(file: UploadFile, duoi_hop_le: tuple) -> bytes:
    # Kiểm tra đuôi file và kích thước, trả về nội dung
    ten_file = (file.filename or '').lower()
    if duoi_hop_le and not ten_file.endswith(duoi_hop_le):
        raise HTTPException(
            status_code=400,
            detail=f"Chỉ chấp nhận file {', '.join(duoi_hop_le)}"
        )

    contents = await file.read()
    if len(contents) > GIOI_HAN_UPLOAD:
        raise HTTPException(
            status_code=400,
            detail=f"File quá lớn. Kích thước tối đa {GIOI_HAN_UPLOAD // (1024 * 1024)}MB"
        )
    if not contents:
        raise HTTPException(status_code=400, detail="File rỗng")
    return contents


def tao_metadata(document, translator: LatexTranslator) -> dict:
    return {
        "mtef_version": document.mtef_version,
        "platform": document.platform,
        "product": document.product,
        "version": document.version,
        "version_sub": document.version_sub,
        "ung_dung": document.application,
        "inline": document.is_inline,
        "so_node": len(document.objects),
        "so_encoding": len(document.tables.encodings),
        "so_font": len(document.tables.fonts),
        "so_mau": len(document.tables.colors),
        "canh_bao": [str(loi) for loi in translator.errors],
    }


@app.get("/")
def doc_api():
    # Endpoint gốc - hướng dẫn sử dụng API
    return {
        "message": "MTEF2LaTeX API đang hoạt động",
        "endpoints": {
            "/api/cong-thuc": "POST - Upload OLE object (dang=ole) hoặc stream MTEF (dang=mtef), trả về LaTeX",
            "/api/docx-cong-thuc": "POST - Upload file .docx, trả về LaTeX của từng công thức nhúng",
            "/health": "GET - Health check",
            "/docs": "Xem Swagger documentation"
        }
    }


@app.post("/api/cong-thuc")
async def chuyen_cong_thuc(
    file: UploadFile = File(...),
    dang: str = Query("ole", description="ole (oleObjectN.bin) hoặc mtef (stream MTEF thô)"),
    giu_loi: bool = Query(False, description="Thay ký tự không dịch được bằng placeholder thay vì báo lỗi")
):
    # Endpoint chuyển một công thức → LaTeX
    if dang not in ('ole', 'mtef'):
        raise HTTPException(status_code=400, detail="Tham số dang phải là 'ole' hoặc 'mtef'")

    contents = await doc_file_upload(file, ())
    logger.info("Nhận công thức %s (%d byte, dang=%s)", file.filename, len(contents), dang)

    mtef_data = extract_mtef_from_ole(contents) if dang == 'ole' else contents
    document = decode_mtef(mtef_data, CAU_HINH_GIAI_MA)
    translator = LatexTranslator(on_unresolved='placeholder' if giu_loi else 'raise')
    latex = document_to_latex(document, translator)

    return {
        "thanh_cong": True,
        "latex": latex,
        "metadata": tao_metadata(document, translator),
    }


@app.post("/api/docx-cong-thuc")
async def chuyen_cong_thuc_docx(file: UploadFile = File(...)):
    # Endpoint trích toàn bộ công thức OLE trong file .docx
    contents = await doc_file_upload(file, ('.docx',))
    logger.info("Nhận file %s (%d byte)", file.filename, len(contents))

    danh_sach = []
    for ten, ole_binary in iter_docx_equations(contents):
        try:
            document = decode_mtef(extract_mtef_from_ole(ole_binary), CAU_HINH_GIAI_MA)
            translator = LatexTranslator(on_unresolved='placeholder')
            danh_sach.append({
                "ten": ten,
                "thanh_cong": True,
                "latex": document_to_latex(document, translator),
                "canh_bao": [str(loi) for loi in translator.errors],
            })
        except MtefError as loi:
            # Lỗi một công thức không làm hỏng cả file
            in_log_loi(f"Không chuyển được {ten}", loi)
            danh_sach.append({"ten": ten, "thanh_cong": False, **loi_thanh_dict(loi)})

    return {
        "thanh_cong": True,
        "so_cong_thuc": len(danh_sach),
        "so_loi": sum(1 for muc in danh_sach if not muc["thanh_cong"]),
        "cong_thuc": danh_sach,
    }


@app.get("/health")
def kiem_tra_suc_khoe():
    # Health check endpoint
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat()
    }


if __name__ == "__main__":
    # Chạy server với uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True  # Auto-reload khi code thay đổi (chỉ dùng development)
    )
