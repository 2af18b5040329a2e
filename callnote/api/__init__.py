# callnote/api/__init__.py
# =========================
# API Layer - CallNote
#
#   POST /api/transcribe  multipart "file" -> transcript + summary
#   POST /api/summarize   {"transcript": str} -> summary
#   GET  /health
