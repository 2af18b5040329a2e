# callnote/__init__.py
# =====================
# CallNote - voice recording transcription & summary
#
# Layers:
#   - callnote.audio    container sniffing, AMR extraction, WAV chunking,
#                       upload preparation
#   - callnote.stt      transcription service client + chunk orchestration
#   - callnote.summary  summarization model fallback chain
#   - callnote.api      HTTP upload surface

__version__ = "1.0.0"
