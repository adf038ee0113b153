"""Find literal content worth turning into template variables.

Detection is regex based: emails, URLs, colors, phone numbers, app names,
sentence-like text in view files and `.env` values. Detected values are merged
into `Candidate`s, which `build_template` turns into variables and
replacements.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from ..definition.model import (
    MATCH_ALL,
    Group,
    GroupKey,
    InstallStep,
    Replacement,
    Template,
    Variable,
    VariableType,
)
from .detector import install_commands
from .scanner import ScanResult, ScannedFile

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_RE = re.compile(r"(?:\+\d{1,3}[-.\s]?)?\(?\d{1,4}\)?[-.\s]?\d{1,4}[-.\s]?\d{1,9}")
URL_RE = re.compile(r"https?://[^\s\"']+|www\.[^\s\"']+")
HEX_COLOR_RE = re.compile(r"#(?:[0-9A-Fa-f]{3}){1,2}\b")
RGB_COLOR_RE = re.compile(
    r"rgba?\s*\(\s*\d{1,3}\s*,\s*\d{1,3}\s*,\s*\d{1,3}(?:\s*,\s*[\d.]+)?\s*\)"
)
SEMANTIC_TEXT_RE = re.compile(r"(?:>|[\"'])([A-Z][^<\"']{5,100})(?:<|[\"'])")

APP_NAME_RES = (
    re.compile(r"title[:\s]*[\"']([^\"']+)[\"']", re.IGNORECASE),
    re.compile(r"app[_-]?name[:\s]*[\"']([^\"']+)[\"']", re.IGNORECASE),
    re.compile(r"name[:\s]*[\"']([^\"']+)[\"']", re.IGNORECASE),
    re.compile(r"<title>([^<]+)</title>", re.IGNORECASE),
    re.compile(r"siteName[:\s]*[\"']([^\"']+)[\"']", re.IGNORECASE),
)

VALUE_BLACKLIST = frozenset(
    {
        "laravel", "localhost", "127.0.0.1", "0.0.0.0", "::1",
        "mysql", "pgsql", "sqlite", "redis", "smtp", "mailtrap",
        "utf8mb4", "unicode", "forge", "root", "your_api_key_here",
        "home", "index", "app", "main", "master", "default",
        "true", "false", "null", "undefined",
    }
)  # fmt: skip

NEUTRAL_COLORS = frozenset({"#000", "#fff", "#000000", "#ffffff", "#333", "#666", "#999", "#ccc"})
IGNORED_URL_HOSTS = ("cdn.", "googleapis.com", "unpkg.com", "jsdelivr.net", "github.com", "npmjs.com")

SKIP_RES = tuple(
    re.compile(p)
    for p in (
        r"node_modules", r"vendor/", r"\.min\.(js|css)$", r"package-lock\.json",
        r"yarn\.lock", r"composer\.lock", r"composer\.json", r"package\.json",
        r"\.map$", r"\.git", r"storage/framework", r"storage/logs", r"dist",
        r"build", r"public/(js|css|fonts|images|vendor)",
        r"database/(migrations|factories|seeders)", r"tests", r"webpack\.mix\.js",
        r"vite\.config\.js",
    )
)  # fmt: skip

VIEW_SUFFIXES = (".blade.php", ".html", ".vue", ".jsx", ".tsx")


@dataclass(frozen=True)
class DetectedContent:
    type: str  # app_name | email | phone | url | color | text_content | environment_variable
    value: str
    file_path: str
    line: int
    column: int


@dataclass
class Candidate:
    """A literal worth templatizing and the variable it would become."""

    value: str
    suggested_name: str
    type: VariableType = VariableType.STRING
    group: GroupKey = GroupKey.OTHER
    files: List[str] = field(default_factory=list)
    required: bool = False


# content type -> (base variable name, variable type, group, required)
_CONTENT_TYPES: Dict[str, tuple] = {
    "app_name": ("appName", VariableType.STRING, GroupKey.BRANDING, True),
    "email": ("contactEmail", VariableType.EMAIL, GroupKey.CONTACT, True),
    "phone": ("phone", VariableType.PHONE, GroupKey.CONTACT, False),
    "url": ("websiteUrl", VariableType.URL, GroupKey.SOCIAL, False),
    "color": ("brandColor", VariableType.COLOR, GroupKey.COLORS, False),
    "text_content": ("contentText", VariableType.STRING, GroupKey.CONTENT, False),
    "environment_variable": ("configValue", VariableType.STRING, GroupKey.CONFIG, False),
}
_FALLBACK_TYPE = ("variable", VariableType.STRING, GroupKey.OTHER, False)


def should_skip_file(relative_path: str) -> bool:
    return any(pattern.search(relative_path) for pattern in SKIP_RES)


def is_blacklisted(value: str) -> bool:
    lowered = value.strip().lower()
    return len(lowered) < 3 or lowered in VALUE_BLACKLIST


def _position(content: str, index: int) -> tuple[int, int]:
    before = content[:index]
    line = before.count("\n") + 1
    column = index - (before.rfind("\n") + 1) + 1
    return line, column


def _found(kind: str, value: str, content: str, index: int, file_path: str) -> DetectedContent:
    line, column = _position(content, index)
    return DetectedContent(type=kind, value=value, file_path=file_path, line=line, column=column)


def _emails(content: str, file_path: str) -> Iterable[DetectedContent]:
    for match in EMAIL_RE.finditer(content):
        value = match.group(0)
        if is_blacklisted(value) or "example.com" in value or "test.com" in value:
            continue
        yield _found("email", value, content, match.start(), file_path)


def _urls(content: str, file_path: str) -> Iterable[DetectedContent]:
    for match in URL_RE.finditer(content):
        value = match.group(0)
        if any(host in value for host in IGNORED_URL_HOSTS):
            continue
        yield _found("url", value, content, match.start(), file_path)


def _colors(content: str, file_path: str) -> Iterable[DetectedContent]:
    for match in HEX_COLOR_RE.finditer(content):
        if match.group(0).lower() in NEUTRAL_COLORS:
            continue
        yield _found("color", match.group(0), content, match.start(), file_path)
    for match in RGB_COLOR_RE.finditer(content):
        yield _found("color", match.group(0), content, match.start(), file_path)


def _phones(content: str, file_path: str) -> Iterable[DetectedContent]:
    for match in PHONE_RE.finditer(content):
        value = match.group(0)
        # version numbers and short digit runs
        if len(value) < 7 or re.match(r"^\d{1,3}\.\d", value):
            continue
        yield _found("phone", value, content, match.start(), file_path)


def _app_names(content: str, file_path: str) -> Iterable[DetectedContent]:
    for pattern in APP_NAME_RES:
        for match in pattern.finditer(content):
            value = match.group(1).strip()
            if not value or is_blacklisted(value):
                continue
            yield _found("app_name", value, content, match.start(), file_path)


def _semantic_text(content: str, file_path: str) -> Iterable[DetectedContent]:
    for match in SEMANTIC_TEXT_RE.finditer(content):
        value = match.group(1).strip()
        if is_blacklisted(value) or "{{" in value or "<?" in value or " " not in value:
            continue
        yield _found("text_content", value, content, match.start(), file_path)


def _env_values(content: str, file_path: str) -> Iterable[DetectedContent]:
    for number, raw in enumerate(content.split("\n"), start=1):
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        value = line.split("=", 1)[1].strip().strip("\"'")
        if value and not is_blacklisted(value):
            yield DetectedContent(
                type="environment_variable",
                value=value,
                file_path=file_path,
                line=number,
                column=line.index("=") + 2,
            )


def extract_content(file: ScannedFile) -> List[DetectedContent]:
    """Detect replaceable content in one scanned file."""
    if not file.content or should_skip_file(file.relative_path):
        return []
    content, rel = file.content, file.relative_path
    results: List[DetectedContent] = []
    results.extend(_emails(content, rel))
    results.extend(_urls(content, rel))
    results.extend(_colors(content, rel))
    results.extend(_phones(content, rel))
    results.extend(_app_names(content, rel))
    if rel.endswith(VIEW_SUFFIXES):
        results.extend(_semantic_text(content, rel))
    if ".env" in rel:
        results.extend(_env_values(content, rel))
    return results


def extract_all_content(files: Sequence[ScannedFile]) -> List[DetectedContent]:
    """Detect content across files, keeping the first hit per (type, value)."""
    seen: set[tuple[str, str]] = set()
    unique: List[DetectedContent] = []
    for file in files:
        for item in extract_content(file):
            key = (item.type, item.value)
            if key in seen:
                continue
            seen.add(key)
            unique.append(item)
    return unique


def candidates_from_content(items: Sequence[DetectedContent]) -> List[Candidate]:
    """Merge detections by value and give each a unique variable name."""
    by_value: Dict[str, Candidate] = {}
    counters: Dict[str, int] = {}
    for item in items:
        candidate = by_value.get(item.value)
        if candidate is None:
            base, var_type, group, required = _CONTENT_TYPES.get(item.type, _FALLBACK_TYPE)
            count = counters.get(base, 0)
            counters[base] = count + 1
            candidate = Candidate(
                value=item.value,
                suggested_name=base if count == 0 else f"{base}{count}",
                type=var_type,
                group=group,
                required=required,
            )
            by_value[item.value] = candidate
        if item.file_path not in candidate.files:
            candidate.files.append(item.file_path)
    return list(by_value.values())


def build_template(
    name: str,
    scan: ScanResult,
    candidates: Sequence[Candidate],
    version: str = "1.0.0",
    author: str = "",
    description: Optional[str] = None,
) -> Template:
    """Assemble a Template from scan results and extraction candidates."""
    variables: List[Variable] = []
    replacements: List[Replacement] = []
    members: Dict[GroupKey, List[str]] = {}
    for candidate in candidates:
        if not candidate.value or not candidate.suggested_name:
            continue
        variables.append(
            Variable(
                name=candidate.suggested_name,
                type=candidate.type,
                default=candidate.value,
                required=candidate.required,
            )
        )
        replacements.append(
            Replacement(
                original=candidate.value,
                variable=candidate.suggested_name,
                file_patterns=tuple(candidate.files) or (MATCH_ALL,),
            )
        )
        if candidate.group is not GroupKey.OTHER:
            members.setdefault(candidate.group, []).append(candidate.suggested_name)

    groups = tuple(
        Group(name=key.slug, variables=tuple(members[key]))
        for key in GroupKey
        if key in members
    )
    project = scan.root_path.name
    template = Template(
        name=name,
        version=version,
        author=author,
        description=description if description is not None else f"Template created from {project}",
        framework=scan.tech_stack.framework,
        variables=tuple(variables),
        groups=groups,
        replacements=tuple(replacements),
        on_install=tuple(InstallStep(command=c) for c in install_commands(scan.tech_stack)),
    )
    logger.debug(
        "Built template %r with %d variables from %d candidates",
        name,
        len(variables),
        len(candidates),
    )
    return template
