"""
App layer: HTTP API 서버 (FastAPI).

역할:
- 템플릿 조회/관리, 렌더 미리보기, 생성 요청
- 생성 규칙 없음 (services/templates에 위임)
"""
