"""
Template and resource loading.

Paths are looked up in the bundled resources directory first, then in the
external folder (SEMINDEX_EXT_FOLDER), so deployments can override or add
queries without touching the package.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

from .errors import TemplateNotFoundError

logger = logging.getLogger(__name__)

RESOURCES_DIR = Path(__file__).parent / "resources"


class TemplateRenderer:
    """Renders Jinja2 templates (SPARQL, JSON bodies, plain text) by relative path."""

    def __init__(self, ext_folder: Optional[str] = None, resources_dir: Path = RESOURCES_DIR):
        self.search_path: List[Path] = [Path(resources_dir)]
        if ext_folder:
            self.search_path.append(Path(ext_folder))
        self.env = Environment(
            loader=ChoiceLoader([FileSystemLoader(str(p)) for p in self.search_path]),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )

    def render(self, path: Optional[str], params: Optional[Dict[str, Any]] = None) -> Optional[str]:
        """Render the template at path. Returns None for an empty path."""
        if not path:
            return None
        try:
            template = self.env.get_template(path)
        except TemplateNotFound as e:
            raise TemplateNotFoundError(f"Template not found: {path} (searched {self._searched()})") from e
        return template.render(**(params or {}))

    def resolve(self, path: str) -> Path:
        """First existing file for path along the search path."""
        for base in self.search_path:
            candidate = base / path
            if candidate.is_file():
                return candidate
        raise TemplateNotFoundError(f"Resource not found: {path} (searched {self._searched()})")

    def load_resource(self, path: Optional[str]) -> Optional[str]:
        if not path:
            return None
        return self.resolve(path).read_text(encoding="utf-8")

    def load_json(self, path: Optional[str]) -> Optional[Dict[str, Any]]:
        text = self.load_resource(path)
        if text is None:
            return None
        return json.loads(text)

    def _searched(self) -> str:
        return ", ".join(str(p) for p in self.search_path)
