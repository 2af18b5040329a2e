"""
tests/test_api.py
==================
HTTP endpoint tests - status codes, Korean messages, debug payload.

The pipeline is patched at the callnote.api.upload seam; no OpenAI calls.
"""

import os
import sys
import unittest
from unittest.mock import MagicMock, patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import httpx
from fastapi.testclient import TestClient
from openai import APIStatusError

from callnote import config
from callnote.api import messages
from callnote.api.upload import app, run_transcription
from callnote.audio.codec import CodecDecodeError
from callnote.audio.preparer import PreparedAudio
from callnote.stt.orchestrator import AllChunksFailed, EmptyTranscript, TranscriptionOutcome
from callnote.summary.summarizer import AllModelsExhausted, Summary

SUMMARY = Summary("요약", "참여자", "핵심", "합의", "법적", "주의")


def status_error(status: int) -> APIStatusError:
    request = httpx.Request("POST", "https://api.openai.com/v1/audio/transcriptions")
    return APIStatusError(f"status {status}", response=httpx.Response(status, request=request), body=None)


def upload(client: TestClient, data: bytes = b"\xff\xfb\x90\x00" * 16, name: str = "call.mp3"):
    return client.post("/api/transcribe", files={"file": (name, data, "audio/mpeg")})


class TestHealth(unittest.TestCase):

    def test_health(self):
        response = TestClient(app).get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})


class TestTranscribeEndpoint(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)

    @patch("callnote.api.upload.run_transcription")
    def test_success(self, mock_run):
        mock_run.return_value = {"transcript": "안녕하세요", "summary": SUMMARY.to_dict()}

        response = upload(self.client, name="record.3gp")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["transcript"], "안녕하세요")
        self.assertEqual(response.json()["summary"]["briefSummary"], "요약")
        self.assertEqual(mock_run.call_args.args[1], "record.3gp")

    def test_missing_file(self):
        response = self.client.post("/api/transcribe")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], messages.NO_FILE)

    @patch("callnote.api.upload.run_transcription")
    def test_file_too_large(self, mock_run):
        with patch.object(config, "MAX_UPLOAD_BYTES", 10):
            response = upload(self.client, data=b"x" * 11)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], messages.FILE_TOO_LARGE)
        mock_run.assert_not_called()

    def test_error_mapping(self):
        cases = [
            (EmptyTranscript("blank"), 422, messages.EMPTY_TRANSCRIPT),
            (AllChunksFailed([RuntimeError("x")]), 502, messages.ALL_CHUNKS_FAILED),
            (CodecDecodeError("bad amr"), 422, messages.AUDIO_DECODE_FAILED),
            (AllModelsExhausted([("m1", "404")]), 500, messages.ALL_MODELS_EXHAUSTED),
            (status_error(413), 413, messages.TRANSCRIBE_STATUS_MESSAGES[413]),
            (status_error(429), 502, messages.TRANSCRIBE_STATUS_MESSAGES[429]),
            (status_error(418), 502, messages.TRANSCRIBE_SERVICE_FAILED),
            (RuntimeError("unexpected"), 500, messages.TRANSCRIBE_FAILED),
        ]
        for error, status, message in cases:
            with self.subTest(error=type(error).__name__, status=status):
                with patch("callnote.api.upload.run_transcription", side_effect=error):
                    response = upload(self.client)
                self.assertEqual(response.status_code, status)
                self.assertEqual(response.json()["error"], message)

    @patch("callnote.api.upload.run_transcription", side_effect=EmptyTranscript("no speech"))
    def test_debug_payload(self, mock_run):
        with patch.object(config, "DEBUG", True):
            response = upload(self.client, data=b"abc", name="voice.m4a")

        debug = response.json()["debug"]
        self.assertEqual(debug["name"], "voice.m4a")
        self.assertEqual(debug["type"], "audio/mpeg")
        self.assertEqual(debug["size"], 3)
        self.assertEqual(debug["detail"], "no speech")

    @patch("callnote.api.upload.run_transcription", side_effect=EmptyTranscript("no speech"))
    def test_no_debug_payload_in_production(self, mock_run):
        with patch.object(config, "DEBUG", False):
            response = upload(self.client)
        self.assertNotIn("debug", response.json())


class TestRunTranscription(unittest.TestCase):

    @patch("callnote.api.upload.summarize")
    @patch("callnote.api.upload.transcribe_audio")
    @patch("callnote.api.upload.get_client")
    @patch("callnote.api.upload.prepare_audio")
    def test_pipeline_order_and_body(self, mock_prepare, mock_client, mock_transcribe, mock_summarize):
        audio = PreparedAudio(b"wav", "audio.wav", "audio/wav")
        mock_prepare.return_value = audio
        mock_client.return_value = MagicMock()
        mock_transcribe.return_value = TranscriptionOutcome(
            transcript="a c", partial_failure="일부 구간(2/3)의 변환에 실패했습니다.",
            chunk_count=3, failed_chunks=(2,),
        )
        mock_summarize.return_value = SUMMARY

        body = run_transcription(b"raw", "call.amr")

        mock_prepare.assert_called_once_with(b"raw", "call.amr")
        self.assertIs(mock_transcribe.call_args.args[0], audio)
        mock_summarize.assert_called_once_with("a c", client=mock_client.return_value)
        self.assertEqual(body, {
            "transcript": "a c",
            "partialFailure": "일부 구간(2/3)의 변환에 실패했습니다.",
            "summary": SUMMARY.to_dict(),
        })


class TestSummarizeEndpoint(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)

    @patch("callnote.api.upload.summarize")
    def test_success(self, mock_summarize):
        mock_summarize.return_value = SUMMARY

        response = self.client.post("/api/summarize", json={"transcript": "통화 내용"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"summary": SUMMARY.to_dict()})
        mock_summarize.assert_called_once_with("통화 내용")

    def test_blank_transcript(self):
        for body in ({}, {"transcript": ""}, {"transcript": "   "}):
            with self.subTest(body=body):
                response = self.client.post("/api/summarize", json=body)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["error"], messages.NO_TEXT)

    def test_invalid_body_gets_korean_400(self):
        bodies = [
            {"content": "not json", "headers": {"Content-Type": "application/json"}},
            {"content": "", "headers": {"Content-Type": "application/json"}},
            {"json": {"transcript": 123}},
            {"json": {"transcript": ["a", "b"]}},
            {"json": ["transcript"]},
        ]
        for kwargs in bodies:
            with self.subTest(body=kwargs):
                with patch("callnote.api.upload.summarize") as mock_summarize:
                    response = self.client.post("/api/summarize", **kwargs)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["error"], messages.NO_TEXT)
                mock_summarize.assert_not_called()

    def test_error_mapping(self):
        cases = [
            (status_error(401), 502, messages.SUMMARIZE_STATUS_MESSAGES[401]),
            (status_error(404), 502, messages.SUMMARIZE_SERVICE_FAILED),
            (AllModelsExhausted([("m1", "404"), ("m2", "400")]), 500, messages.ALL_MODELS_EXHAUSTED),
            (ValueError("broken"), 500, messages.SUMMARIZE_FAILED),
        ]
        for error, status, message in cases:
            with self.subTest(error=type(error).__name__, status=status):
                with patch("callnote.api.upload.summarize", side_effect=error):
                    response = self.client.post("/api/summarize", json={"transcript": "내용"})
                self.assertEqual(response.status_code, status)
                self.assertEqual(response.json()["error"], message)


if __name__ == "__main__":
    unittest.main()
