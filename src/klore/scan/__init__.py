"""Project scanning and content extraction."""

from .detector import TechStack, detect_tech_stack, install_commands
from .extractor import (
    Candidate,
    DetectedContent,
    build_template,
    candidates_from_content,
    extract_all_content,
)
from .scanner import ScannedFile, ScanResult, format_bytes, scan_project

__all__ = [
    "Candidate",
    "DetectedContent",
    "ScanResult",
    "ScannedFile",
    "TechStack",
    "build_template",
    "candidates_from_content",
    "detect_tech_stack",
    "extract_all_content",
    "format_bytes",
    "install_commands",
    "scan_project",
]
