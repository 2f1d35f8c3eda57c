"""
LlamaParse reader: send a file to the hosted parsing service and read back
markdown (or plain text).

Flow: upload -> poll job status -> fetch result. One Document per file.
"""

import logging
import time
from pathlib import Path
from typing import Literal

import httpx

from agentlab.core.config import (
    LLAMA_CLOUD_API_KEY,
    LLAMA_PARSE_BASE_URL,
    LLAMA_PARSE_MAX_WAIT,
    LLAMA_PARSE_POLL_INTERVAL,
    PARSE_API_TIMEOUT,
)
from agentlab.core.errors import ParsingError, ServiceUnavailableError
from agentlab.schemas.documents import Document

logger = logging.getLogger(__name__)

_FAILED_STATUSES = frozenset({"ERROR", "CANCELED", "CANCELLED"})


class LlamaParseReader:
    def __init__(
        self,
        result_type: Literal["markdown", "text"] = "markdown",
        api_key: str | None = None,
        base_url: str = LLAMA_PARSE_BASE_URL,
        poll_interval: float = LLAMA_PARSE_POLL_INTERVAL,
        max_wait: float = LLAMA_PARSE_MAX_WAIT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.result_type = result_type
        self.api_key = api_key if api_key is not None else LLAMA_CLOUD_API_KEY
        self.base_url = base_url.rstrip("/")
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self._transport = transport

    def _client(self) -> httpx.Client:
        if not self.api_key:
            raise ServiceUnavailableError(
                "LLAMA_CLOUD_API_KEY must be set in .env. Get a key from https://cloud.llamaindex.ai"
            )
        return httpx.Client(
            base_url=f"{self.base_url}/api/v1/parsing",
            headers={"Authorization": f"Bearer {self.api_key}", "Accept": "application/json"},
            timeout=PARSE_API_TIMEOUT,
            transport=self._transport,
        )

    def _wait_for_job(self, client: httpx.Client, job_id: str, path: str) -> None:
        deadline = time.monotonic() + self.max_wait
        while True:
            response = client.get(f"/job/{job_id}")
            response.raise_for_status()
            status = str(response.json().get("status", "")).upper()
            logger.debug("[llama_parse] job=%s status=%s", job_id, status)
            if status == "SUCCESS":
                return
            if status in _FAILED_STATUSES:
                raise ParsingError(path, f"job {job_id} ended with status {status}")
            if time.monotonic() >= deadline:
                raise ParsingError(path, f"job {job_id} did not finish within {self.max_wait:.0f}s")
            time.sleep(self.poll_interval)

    def load_data(self, file_path: str | Path) -> list[Document]:
        p = Path(file_path)
        logger.info("[llama_parse] IN  file=%s result_type=%s", p, self.result_type)
        with self._client() as client:
            with p.open("rb") as fh:
                response = client.post("/upload", files={"file": (p.name, fh)})
            response.raise_for_status()
            job_id = response.json().get("id")
            if not job_id:
                raise ParsingError(str(p), "upload response carried no job id")
            self._wait_for_job(client, job_id, str(p))
            result = client.get(f"/job/{job_id}/result/{self.result_type}")
            result.raise_for_status()
            text = result.json().get(self.result_type) or ""
        logger.info("[llama_parse] OUT file=%s job=%s text_len=%d", p, job_id, len(text))
        return [Document(text=text, metadata={"file_path": str(file_path), "file_name": p.name})]
