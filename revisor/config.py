from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


@dataclass
class ProofreaderConfiguration:
    """Settings for one command-line proofreading run.

    Provider credentials and model names are read by the provider wrappers
    themselves (``GEMINI_API_KEY``, ``GEMINI_MODEL``, ``MISTRAL_API_KEY``...).
    """

    output_dir: Path
    provider: str | None
    dotenv_path: Path | None
    log_level: str

    @classmethod
    def from_env(
        cls,
        *,
        dotenv_path: Path | None = None,
        output_dir: Path | None = None,
        provider: str | None = None,
        log_level: str | None = None,
    ) -> "ProofreaderConfiguration":
        """Build the configuration; explicit arguments win over the environment."""
        if dotenv_path is not None:
            load_dotenv(dotenv_path=str(dotenv_path), override=True)
        else:
            load_dotenv()

        return cls(
            output_dir=output_dir or Path(os.environ.get("REVISOR_OUTPUT_DIR", ".")),
            provider=provider or os.environ.get("LLM_PRIMARY") or None,
            dotenv_path=dotenv_path,
            log_level=(log_level or os.environ.get("REVISOR_LOG_LEVEL", "INFO")).upper(),
        )

    def get_output_path(self, file_name: str) -> Path:
        """Report path inside the output directory."""
        return self.output_dir / file_name
