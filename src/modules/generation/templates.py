"""Contract template registry backed by markdown files."""

import re
from dataclasses import dataclass
from pathlib import Path
from string import Template
from typing import Any

import structlog

logger = structlog.get_logger()

# Regex to match markdown H1 heading: # Title (at start of line)
_MARKDOWN_H1_PATTERN = re.compile(r"^#\s+(.+)$", re.MULTILINE)

TEMPLATE_SUFFIXES = (".md", ".txt")


@dataclass(frozen=True)
class ContractTemplate:
    """A contract template.

    The body uses ``$field`` / ``${field}`` placeholders filled from the
    form values. Unknown placeholders are left untouched.
    """

    contract_id: str
    title: str
    body: str

    def render(self, values: dict[str, Any]) -> str:
        substitutions = {k: _format_value(v) for k, v in values.items()}
        return Template(self.body).safe_substitute(substitutions)


class TemplateRegistry:
    """Looks up contract templates by id."""

    def __init__(self, templates: dict[str, ContractTemplate] | None = None) -> None:
        self._templates: dict[str, ContractTemplate] = dict(templates or {})

    @classmethod
    def from_directory(cls, directory: Path) -> "TemplateRegistry":
        """Load every ``.md``/``.txt`` file in a directory.

        The contract id is the file stem. A missing directory yields an
        empty registry.
        """
        if not directory.is_dir():
            logger.warning("templates_directory_missing", path=str(directory))
            return cls()

        templates: dict[str, ContractTemplate] = {}
        for path in sorted(directory.iterdir()):
            if path.suffix.lower() not in TEMPLATE_SUFFIXES or not path.is_file():
                continue
            body = path.read_text(encoding="utf-8")
            templates[path.stem] = ContractTemplate(
                contract_id=path.stem,
                title=_extract_title(body, path.stem),
                body=body,
            )

        logger.info("templates_loaded", path=str(directory), count=len(templates))
        return cls(templates)

    def get(self, contract_id: str) -> ContractTemplate | None:
        return self._templates.get(contract_id)

    def __contains__(self, contract_id: object) -> bool:
        return contract_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)


def humanize(contract_id: str) -> str:
    """Turn an id like ``contractor-agreement`` into "Contractor Agreement"."""
    return re.sub(r"[-_]+", " ", contract_id).strip().title()


def _extract_title(body: str, stem: str) -> str:
    match = _MARKDOWN_H1_PATTERN.search(body)
    if match:
        return match.group(1).strip()
    return humanize(stem)


def _format_value(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)
