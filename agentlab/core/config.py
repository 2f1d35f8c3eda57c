"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and
tutorial-wide constants. Keeps the rest of the package decoupled from how
config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

# Source documents and the LlamaParse cache (relative to the working directory)
DATA_DIR: str = os.getenv("DATA_DIR", "data").strip() or "data"
PARSING_CACHE: str = os.getenv("PARSING_CACHE", "./cache.json").strip() or "./cache.json"
BUDGET_PDF: str = "sf_budget_2023_2024.pdf"

# File types the directory reader understands
ALLOWED_EXTENSIONS: frozenset[str] = frozenset({".txt", ".md", ".csv", ".pdf", ".xlsx", ".xls"})

# Chunking defaults (tuning these affects retrieval quality)
CHUNK_SIZE: int = 1000
CHUNK_OVERLAP: int = 100

# Retrieval
SIMILARITY_TOP_K: int = 10

# OpenAI (hosted LLM)
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = os.getenv("OPENAI_LLM_MODEL", "gpt-4o").strip() or "gpt-4o"

# Ollama (local LLM)
OLLAMA_BASE_URL: str = (
    os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").strip().rstrip("/")
    or "http://localhost:11434"
)
OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "mixtral:8x7b").strip() or "mixtral:8x7b"

# Hugging Face (embeddings). bge-small-en-v1.5 produces 384-dim vectors.
HF_API_KEY: str = os.getenv("HF_API_KEY", "").strip()
HF_EMBED_MODEL: str = os.getenv("HF_EMBED_MODEL", "BAAI/bge-small-en-v1.5").strip() or "BAAI/bge-small-en-v1.5"
VECTOR_DIM: int = 384
EMBED_BATCH_SIZE: int = 32

# LlamaParse (hosted document parsing)
LLAMA_CLOUD_API_KEY: str = os.getenv("LLAMA_CLOUD_API_KEY", "").strip()
LLAMA_PARSE_BASE_URL: str = "https://api.cloud.llamaindex.ai"
LLAMA_PARSE_POLL_INTERVAL: float = 2.0
LLAMA_PARSE_MAX_WAIT: float = 600.0

# Milvus (persistent vector store)
MILVUS_URI: str = os.getenv("MILVUS_URI", "http://localhost:19530").strip() or "http://localhost:19530"
MILVUS_TOKEN: str = os.getenv("MILVUS_TOKEN", "").strip()
COLLECTION_NAME: str = "documents"

# API timeouts (seconds)
EMBED_API_TIMEOUT: float = 30.0
LLM_API_TIMEOUT: float = 60.0
OLLAMA_API_TIMEOUT: float = 300.0
PARSE_API_TIMEOUT: float = 60.0

# Agent loop
MAX_AGENTIC_ROUNDS: int = 12
AGENT_MAX_TOKENS: int = 512
