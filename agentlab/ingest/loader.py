# Directory reader: walk a folder and turn each supported file into a Document.
# Single place for "file/bytes -> text". No chunking, no embeddings.

import io
import logging
from pathlib import Path

from agentlab.core.config import ALLOWED_EXTENSIONS
from agentlab.schemas.documents import Document

logger = logging.getLogger(__name__)


def bytes_to_text(raw: bytes, filename: str) -> str:
    """Convert raw file bytes to text by extension (.txt/.md/.csv, .pdf, .xlsx/.xls)."""
    ext = Path(filename).suffix.lower() if filename else ""
    if ext == ".pdf":
        return _read_pdf(raw)
    if ext in (".xlsx", ".xls"):
        return _read_excel(raw)
    return raw.decode("utf-8", errors="replace")


def _read_pdf(raw: bytes) -> str:
    from pypdf import PdfReader
    reader = PdfReader(io.BytesIO(raw))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _read_excel(raw: bytes) -> str:
    import pandas as pd
    df = pd.read_excel(io.BytesIO(raw), sheet_name=None, header=None)
    parts = []
    for sheet_df in df.values():
        parts.append(sheet_df.astype(str).to_csv(sep=" ", index=False, header=False))
    return "\n\n".join(parts)


class SimpleDirectoryReader:
    """
    Recursively load every supported file under a directory, in sorted path
    order. Hidden files and directories are skipped; unsupported extensions
    are logged and skipped.
    """

    def __init__(self, extensions: frozenset[str] = ALLOWED_EXTENSIONS, recursive: bool = True) -> None:
        self.extensions = extensions
        self.recursive = recursive

    def _iter_files(self, root: Path) -> list[Path]:
        pattern = "**/*" if self.recursive else "*"
        files = []
        for path in sorted(root.glob(pattern)):
            rel_parts = path.relative_to(root).parts
            if any(part.startswith(".") for part in rel_parts) or not path.is_file():
                continue
            if path.suffix.lower() not in self.extensions:
                logger.info("[loader] skipping unsupported file %s", path)
                continue
            files.append(path)
        return files

    def load_file(self, path: str | Path) -> Document:
        p = Path(path)
        text = bytes_to_text(p.read_bytes(), p.name)
        return Document(text=text, metadata={"file_path": str(p), "file_name": p.name})

    def load_data(self, input_dir: str | Path) -> list[Document]:
        root = Path(input_dir)
        if not root.is_dir():
            raise FileNotFoundError(f"Input directory not found: {root}")
        documents = [self.load_file(p) for p in self._iter_files(root)]
        logger.info("[loader] loaded %d documents from %s", len(documents), root)
        return documents
