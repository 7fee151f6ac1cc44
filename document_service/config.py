"""Document service configuration — all values from environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class DocumentConfig:
    """Immutable configuration loaded once at startup."""

    # Assets, resolved by the service layer and handed to the renderer
    font_path: str = field(default_factory=lambda: os.getenv("FONT_PATH", "assets/fonts/DejaVuSans.ttf"))
    font_family: str = field(default_factory=lambda: os.getenv("FONT_FAMILY", "DejaVu"))
    logo_path: str = field(default_factory=lambda: os.getenv("LOGO_PATH", "assets/logo.png"))

    # Letterhead defaults for requests that omit them
    company_name: str = field(default_factory=lambda: os.getenv("COMPANY_NAME", "Experts Technology, Sangli"))
    company_address: str = field(default_factory=lambda: os.getenv("COMPANY_ADDRESS", "Address Line 1, Sangli"))

    # Observability
    otel_endpoint: str = field(default_factory=lambda: os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", ""))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


config = DocumentConfig()
