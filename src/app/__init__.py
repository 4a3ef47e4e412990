"""
App layer: 웹 서버 (FastAPI + Jinja2).

역할:
- 업로드 폼 / 백그라운드 업로드 / 삭제 요청 처리
- Cloudinary 호출 (providers/)
- 갤러리 화면 렌더링

주의: 폴더 구분
- src/app/templates/ → Jinja2 HTML
- src/app/static/ → gallery.js, style.css
"""
