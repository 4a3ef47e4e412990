"""
사용자 노출 메시지 (베트남어).

서버 응답(JSON error / HTML 배너)과
클라이언트 사전 검증(gallery.js)이 같은 문구를 쓰도록 페이지에 JSON으로 주입된다.
"""

from src.domain.constants import MAX_FILE_SIZE_BYTES
from src.domain.errors import ErrorCodes

GENERIC_UPLOAD_ERROR = "Có lỗi xảy ra khi upload!"
STORE_FAILED_PREFIX = "Lỗi khi upload lên Cloudinary: "
DELETE_FAILED_PREFIX = "Xóa ảnh thất bại: "

MISSING_PUBLIC_ID = "Thiếu publicId"
INVALID_PUBLIC_ID = "publicId không hợp lệ"

UPLOAD_SUCCESS_TEMPLATE = "Upload thành công {count} ảnh lên Cloudinary!"

DELETED_BANNER = "Đã xóa ảnh thành công!"
EMPTY_GALLERY = "Chưa có ảnh nào được upload"

_REJECT_MESSAGES = {
    ErrorCodes.UNSUPPORTED_MEDIA_TYPE: "Chỉ chấp nhận file ảnh PNG!",
    ErrorCodes.TOO_MANY_FILES: "Số lượng file vượt quá giới hạn cho phép!",
    ErrorCodes.UNEXPECTED_FIELD: "Field không hợp lệ!",
    ErrorCodes.NO_FILES_SELECTED: "Vui lòng chọn ít nhất một file ảnh PNG!",
    ErrorCodes.UPLOAD_FAILED: GENERIC_UPLOAD_ERROR,
}


def format_size_limit(max_file_size: int) -> str:
    """바이트 한도를 사람이 읽는 단위로 (1048576 → '1MB')."""
    mib = 1024 * 1024
    if max_file_size % mib == 0:
        return f"{max_file_size // mib}MB"
    if max_file_size % 1024 == 0:
        return f"{max_file_size // 1024}KB"
    return f"{max_file_size}B"


def file_too_large_message(max_file_size: int = MAX_FILE_SIZE_BYTES) -> str:
    return (
        f"File quá lớn! Kích thước tối đa là "
        f"{format_size_limit(max_file_size)} cho mỗi file."
    )


def reject_message(code: str, max_file_size: int = MAX_FILE_SIZE_BYTES) -> str:
    """
    검증 에러 코드 → 사용자 메시지.

    알 수 없는 코드는 일반 업로드 오류 메시지로.
    """
    if code == ErrorCodes.FILE_TOO_LARGE:
        return file_too_large_message(max_file_size)
    return _REJECT_MESSAGES.get(code, GENERIC_UPLOAD_ERROR)


def store_failed_message(provider_message: str) -> str:
    return STORE_FAILED_PREFIX + provider_message


def delete_failed_message(provider_message: str) -> str:
    return DELETE_FAILED_PREFIX + provider_message


def upload_success_message(count: int) -> str:
    return UPLOAD_SUCCESS_TEMPLATE.format(count=count)


def client_messages(max_file_size: int = MAX_FILE_SIZE_BYTES) -> dict[str, str]:
    """gallery.js 사전 검증용 메시지 묶음."""
    return {
        "unsupportedMediaType": reject_message(ErrorCodes.UNSUPPORTED_MEDIA_TYPE),
        "fileTooLarge": file_too_large_message(max_file_size),
        "tooManyFiles": reject_message(ErrorCodes.TOO_MANY_FILES),
        "noFilesSelected": reject_message(ErrorCodes.NO_FILES_SELECTED),
        "generic": GENERIC_UPLOAD_ERROR,
        "uploadSuccess": UPLOAD_SUCCESS_TEMPLATE,
        "emptyGallery": EMPTY_GALLERY,
    }
