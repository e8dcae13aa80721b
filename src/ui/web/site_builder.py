"""
Static site builder — render the public directory into plain files.

Output layout (under the workspace's ``site_dir``):

    index.html            English, LTR
    ar/index.html         Arabic, RTL
    data/tools.json       the catalog, as published
    static/css/site.css   copied from the package
    .toolsdir-build       marker: this directory may be wiped and rebuilt

The pages are rendered from the same Jinja templates the Flask server
uses, so the built site and the live one look the same. The output
directory is wiped before every build, but only when it is empty or
holds the marker of an earlier build, and never when it is (or contains)
one of the protected paths: the workspace root and its ``.state``.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from src.core.models.catalog import Catalog
from src.core.models.directory import DirectoryConfig
from src.core.services.i18n import LANGUAGES
from src.ui.web.page_context import directory_page_context

logger = logging.getLogger(__name__)

_PACKAGE_DIR = Path(__file__).parent
TEMPLATES_DIR = _PACKAGE_DIR / "templates"
STATIC_DIR = _PACKAGE_DIR / "static"
BUILD_MARKER = ".toolsdir-build"


@dataclass
class BuildResult:
    ok: bool = False
    output_dir: Path | None = None
    files: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "output_dir": str(self.output_dir) if self.output_dir else None,
            "files": self.files,
            "error": self.error,
        }


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _page_path(lang: str) -> str:
    return "index.html" if lang == "en" else f"{lang}/index.html"


def _check_output_dir(output_dir: Path, protected: Iterable[Path]) -> str | None:
    """Why ``output_dir`` must not be wiped, or None when it is safe."""
    target = output_dir.resolve()
    for path in protected:
        guarded = path.resolve()
        if target == guarded or target in guarded.parents:
            return f"Refusing to build into {output_dir}: it would delete {path}"
    if not output_dir.exists():
        return None
    if not output_dir.is_dir():
        return f"Refusing to build into {output_dir}: not a directory"
    if any(output_dir.iterdir()) and not (output_dir / BUILD_MARKER).is_file():
        return f"Refusing to replace {output_dir}: not empty and not an earlier build"
    return None


def build_site(
    catalog: Catalog,
    output_dir: Path,
    config: DirectoryConfig | None = None,
    protected: Iterable[Path] = (),
) -> BuildResult:
    """Render every language version of the directory.

    Args:
        catalog: The catalog to publish.
        output_dir: Target directory (recreated when safe to).
        config: Workspace config (site titles).
        protected: Paths the build must never delete.
    """
    config = config or DirectoryConfig()
    result = BuildResult(output_dir=output_dir)
    refusal = _check_output_dir(output_dir, protected)
    if refusal:
        logger.error("Site build refused: %s", refusal)
        result.error = refusal
        return result
    env = _environment()
    template = env.get_template("index.html")

    try:
        if output_dir.exists():
            shutil.rmtree(output_dir)
        output_dir.mkdir(parents=True)
        (output_dir / BUILD_MARKER).write_text("Generated by toolsdir build\n", encoding="utf-8")

        for lang in LANGUAGES:
            rel = _page_path(lang)
            depth = rel.count("/")
            prefix = "../" * depth
            page = template.render(**directory_page_context(
                catalog,
                config,
                lang=lang,
                asset_base=f"{prefix}static/",
                lang_urls={other: prefix + _page_path(other) for other in LANGUAGES},
                search_action=None,
            ))
            target = output_dir / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(page, encoding="utf-8")
            result.files.append(rel)

        data_file = output_dir / "data" / "tools.json"
        data_file.parent.mkdir(parents=True, exist_ok=True)
        data_file.write_text(catalog.to_json(), encoding="utf-8")
        result.files.append("data/tools.json")

        css_src = STATIC_DIR / "css" / "site.css"
        css_dst = output_dir / "static" / "css" / "site.css"
        css_dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(css_src, css_dst)
        result.files.append("static/css/site.css")
    except OSError as e:
        logger.error("Site build failed: %s", e)
        result.error = f"Build failed: {e}"
        return result

    result.ok = True
    logger.info("Built %d files into %s", len(result.files), output_dir)
    return result
