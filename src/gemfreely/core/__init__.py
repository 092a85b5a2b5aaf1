"""Network clients shared by the CLI and the sync engine."""

from .async_utils import run_bounded, run_sync
from .client import WriteFreelyClient
from .gemini import GeminiClient

__all__ = ["GeminiClient", "WriteFreelyClient", "run_bounded", "run_sync"]
