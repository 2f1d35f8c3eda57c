"""
Tests for the directory reader and the LlamaParse reader (httpx.MockTransport).
"""

from pathlib import Path

import httpx
import pytest

from agentlab.core.errors import ParsingError, ServiceUnavailableError
from agentlab.ingest.llama_parse import LlamaParseReader
from agentlab.ingest.loader import SimpleDirectoryReader, bytes_to_text


class TestSimpleDirectoryReader:
    def test_reads_recursively_in_sorted_order(self, tmp_path: Path) -> None:
        (tmp_path / "b.txt").write_text("second", encoding="utf-8")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "a.md").write_text("# nested", encoding="utf-8")
        (tmp_path / "a.txt").write_text("first", encoding="utf-8")

        docs = SimpleDirectoryReader().load_data(tmp_path)

        assert [d.metadata["file_name"] for d in docs] == ["a.txt", "b.txt", "a.md"]
        assert [d.text for d in docs] == ["first", "second", "# nested"]
        assert docs[2].metadata["file_path"] == str(tmp_path / "sub" / "a.md")

    def test_skips_hidden_and_unsupported(self, tmp_path: Path) -> None:
        (tmp_path / ".env.txt").write_text("secret", encoding="utf-8")
        (tmp_path / ".cache").mkdir()
        (tmp_path / ".cache" / "x.txt").write_text("cached", encoding="utf-8")
        (tmp_path / "image.png").write_bytes(b"\x89PNG")
        (tmp_path / "notes.txt").write_text("kept", encoding="utf-8")

        docs = SimpleDirectoryReader().load_data(tmp_path)

        assert [d.text for d in docs] == ["kept"]

    def test_non_recursive(self, tmp_path: Path) -> None:
        (tmp_path / "top.txt").write_text("top", encoding="utf-8")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "deep.txt").write_text("deep", encoding="utf-8")
        docs = SimpleDirectoryReader(recursive=False).load_data(tmp_path)
        assert [d.text for d in docs] == ["top"]

    def test_missing_dir(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            SimpleDirectoryReader().load_data(tmp_path / "nope")


def test_bytes_to_text_decodes_text_files() -> None:
    assert bytes_to_text("café".encode("utf-8"), "menu.txt") == "café"
    assert bytes_to_text(b"a,b\n1,2", "table.csv") == "a,b\n1,2"


def _parse_service(statuses: list[str], calls: list[str], markdown: str = "# Budget\n\nPolice: $776M"):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(f"{request.method} {request.url.path}")
        assert request.headers["Authorization"] == "Bearer llx-test"
        path = request.url.path
        if request.method == "POST" and path == "/api/v1/parsing/upload":
            assert b"budget.pdf" in request.content
            return httpx.Response(200, json={"id": "job-1", "status": "PENDING"})
        if path == "/api/v1/parsing/job/job-1":
            return httpx.Response(200, json={"id": "job-1", "status": statuses.pop(0)})
        if path == "/api/v1/parsing/job/job-1/result/markdown":
            return httpx.Response(200, json={"markdown": markdown})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


class TestLlamaParseReader:
    def _pdf(self, tmp_path: Path) -> Path:
        pdf = tmp_path / "budget.pdf"
        pdf.write_bytes(b"%PDF-1.4 fake")
        return pdf

    def test_upload_poll_fetch(self, tmp_path: Path) -> None:
        calls: list[str] = []
        reader = LlamaParseReader(
            api_key="llx-test",
            poll_interval=0,
            transport=_parse_service(["PENDING", "SUCCESS"], calls),
        )
        docs = reader.load_data(self._pdf(tmp_path))

        assert len(docs) == 1
        assert docs[0].text.startswith("# Budget")
        assert docs[0].metadata["file_name"] == "budget.pdf"
        assert calls == [
            "POST /api/v1/parsing/upload",
            "GET /api/v1/parsing/job/job-1",
            "GET /api/v1/parsing/job/job-1",
            "GET /api/v1/parsing/job/job-1/result/markdown",
        ]

    def test_failed_job_raises(self, tmp_path: Path) -> None:
        reader = LlamaParseReader(api_key="llx-test", poll_interval=0, transport=_parse_service(["ERROR"], []))
        with pytest.raises(ParsingError):
            reader.load_data(self._pdf(tmp_path))

    def test_timeout_raises(self, tmp_path: Path) -> None:
        reader = LlamaParseReader(
            api_key="llx-test",
            poll_interval=0,
            max_wait=0,
            transport=_parse_service(["PENDING"], []),
        )
        with pytest.raises(ParsingError):
            reader.load_data(self._pdf(tmp_path))

    def test_missing_key(self, tmp_path: Path) -> None:
        with pytest.raises(ServiceUnavailableError):
            LlamaParseReader(api_key="").load_data(self._pdf(tmp_path))
