"""
Domain Constants: 업로드/갤러리 전역 상수.

업로드 제한, 갤러리 폴더, 썸네일 변환 등 시스템 전반에서 사용되는 값들.
default.yaml에서 오버라이드 가능한 값은 여기의 값이 기본값.
"""

# =============================================================================
# Upload Limits (업로드 제한)
# =============================================================================
# 요청 1건 기준:
# - field: images
# - fileFilter: image/png만 허용
# - limits.fileSize: 1MB

UPLOAD_FIELD_NAME = "images"
PNG_MEDIA_TYPE = "image/png"
MAX_FILE_SIZE_BYTES = 1 * 1024 * 1024  # 1MB
MAX_FILES_PER_REQUEST = 10

# =============================================================================
# Gallery (갤러리)
# =============================================================================
# Provider 쪽 논리 폴더. 업로드/목록/삭제 모두 이 폴더로 한정.

GALLERY_FOLDER = "png-uploads"
GALLERY_MAX_RESULTS = 50
GALLERY_SORT_FIELD = "created_at"
GALLERY_SORT_DIRECTION = "desc"

# =============================================================================
# Thumbnail (썸네일 변환)
# =============================================================================
# 300x300 fill-crop, 품질/포맷 자동.
# Provider URL 스킴: .../image/upload/<transformation>/v123/<public_id>.png

THUMBNAIL_WIDTH = 300
THUMBNAIL_HEIGHT = 300
THUMBNAIL_CROP = "fill"
THUMBNAIL_QUALITY = "auto"
THUMBNAIL_FETCH_FORMAT = "auto"

UPLOAD_PATH_MARKER = "/upload/"

# =============================================================================
# Provider
# =============================================================================

DEFAULT_PROVIDER_TIMEOUT = 30.0  # seconds
DEFAULT_LIST_RETRIES = 1
