# Build the three LLM index files from extracted page data:
#   llms.txt       - title/description + page links grouped by directory
#   llms-small.txt - bare link list
#   llms-full.txt  - every page's Markdown content

import logging
import posixpath
from pathlib import Path
from typing import Dict, List

DEFAULT_SEPARATOR = "\n\n---\n\n"


# "/guides/setup/" -> "guides", "/about" -> "/"
def group_pages_by_directory(pages: List[Dict]) -> Dict[str, List[Dict]]:
    groups: Dict[str, List[Dict]] = {}
    for page in pages:
        directory = posixpath.dirname(page["pathname"].rstrip("/") or "/")
        if directory in ("/", ".", ""):
            name = "/"
        else:
            name = [seg for seg in directory.split("/") if seg][-1]
        groups.setdefault(name, []).append(page)
    return groups


def render_llms_txt(pages: List[Dict], cfg: Dict) -> str:
    lines = [
        f"# {cfg['title']}",
        f"> {cfg['description']}",
        "",
        "## Pages",
        "",
    ]
    for directory, dir_pages in group_pages_by_directory(pages).items():
        if directory != "/":
            lines.append(f"### {directory}")
            lines.append("")
        for page in dir_pages:
            desc = f" - {page['description']}" if page.get("description") else ""
            lines.append(f"- [{page['title']}]({page['pathname']}){desc}")
        lines.append("")

    lines.extend(["", "*Auto-generated documentation index*"])
    return "\n".join(lines).strip()


def render_llms_small_txt(pages: List[Dict], cfg: Dict) -> str:
    lines = [
        f"# {cfg['title']}",
        "> Structure-only documentation",
        "",
    ]
    for page in pages:
        lines.append(f"- [{page['title']}]({page['pathname']})")
    return "\n".join(lines).strip()


def render_llms_full_txt(pages: List[Dict], cfg: Dict) -> str:
    lines = [
        f"# {cfg['title']}",
        f"> {cfg['description']}",
        "",
        "*Complete documentation content below*",
        "",
    ]
    sections = []
    for page in pages:
        if not page.get("content"):
            continue
        parts = [f"# {page['title']}"]
        if page.get("description"):
            parts.append(f"> {page['description']}")
        parts.extend(["", page["content"]])
        sections.append("\n".join(parts))

    lines.append((cfg.get("custom_separator") or DEFAULT_SEPARATOR).join(sections))
    return "\n".join(lines).strip()


def write_outputs(pages: List[Dict], cfg: Dict, out_dir) -> List[Path]:
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    rendered = {
        "llms.txt": render_llms_txt(pages, cfg),
        "llms-small.txt": render_llms_small_txt(pages, cfg),
        "llms-full.txt": render_llms_full_txt(pages, cfg),
    }
    written = []
    for name, content in rendered.items():
        path = out / name
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        logging.info(f"Wrote {path} ({len(content)} chars)")
        written.append(path)
    return written
