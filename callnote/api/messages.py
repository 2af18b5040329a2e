"""
callnote/api/messages.py
=========================
User-facing error messages - CallNote

The users are non-technical Korean speakers, so every fatal condition is
reported with a short Korean sentence telling them what to do next.
"""

NO_FILE: str = "파일이 없습니다."
FILE_TOO_LARGE: str = "파일 크기가 25MB를 초과합니다."
NO_TEXT: str = "텍스트가 없습니다."

EMPTY_TRANSCRIPT: str = "음성을 인식할 수 없습니다. 녹음 상태를 확인해주세요."
ALL_CHUNKS_FAILED: str = "음성 변환에 실패했습니다. 다시 시도해주세요."
ALL_MODELS_EXHAUSTED: str = "모든 GPT 모델을 사용할 수 없습니다. 관리자에게 문의하세요."
AUDIO_DECODE_FAILED: str = "오디오 파일을 변환할 수 없습니다. 다른 형식으로 녹음된 파일을 사용해주세요."

TRANSCRIBE_FAILED: str = "처리 중 오류가 발생했습니다. 잠시 후 다시 시도해주세요."
TRANSCRIBE_SERVICE_FAILED: str = "처리 중 오류가 발생했습니다."
SUMMARIZE_FAILED: str = "요약 중 오류가 발생했습니다. 잠시 후 다시 시도해주세요."
SUMMARIZE_SERVICE_FAILED: str = "요약 중 오류가 발생했습니다."

_SHARED_STATUS_MESSAGES: dict[int, str] = {
    401: "API 인증에 실패했습니다. 관리자에게 문의하세요.",
    429: "API 사용량이 초과되었습니다. 1-2분 후 다시 시도해주세요.",
    500: "OpenAI 서버 오류입니다. 잠시 후 다시 시도해주세요.",
    502: "OpenAI 서버에 연결할 수 없습니다. 잠시 후 다시 시도해주세요.",
    503: "OpenAI 서비스가 일시적으로 중단되었습니다. 잠시 후 다시 시도해주세요.",
}

TRANSCRIBE_STATUS_MESSAGES: dict[int, str] = {
    **_SHARED_STATUS_MESSAGES,
    400: "요청 형식이 잘못되었습니다.",
    404: "AI 모델을 찾을 수 없습니다.",
    413: "파일이 너무 큽니다. 25MB 이하 파일을 사용해주세요.",
}

SUMMARIZE_STATUS_MESSAGES: dict[int, str] = dict(_SHARED_STATUS_MESSAGES)


def status_message(status: int | None, table: dict[int, str], default: str) -> str:
    """Message for an upstream HTTP status, or *default* when unmapped."""
    return table.get(status or 0, default)
