# Description: Find built HTML pages under a dist directory, filter them with the
# include/exclude glob rules from llms.yaml, and extract title/description/Markdown
# content for each page. Used by run_all.py.

from __future__ import annotations
import logging
import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from bs4 import BeautifulSoup

from ingest.html_to_markdown import convert

DEFAULT_INCLUDE_PATTERNS = ["**/*"]
DEFAULT_EXCLUDE_PATTERNS = ["**/404*", "**/500*", "**/api/**"]

# site chrome and explicit opt-outs, always ignored on top of llms.yaml extras
DEFAULT_IGNORE_SELECTORS = ["header", "footer", "nav", ".no-llms"]


# dist/index.html -> "/", dist/guide/index.html -> "/guide/", dist/about.html -> "/about"
def pathname_for(html_path, dist_dir) -> str:
    rel = Path(html_path).relative_to(dist_dir).as_posix()
    if rel == "index.html":
        return "/"
    if rel.endswith("/index.html"):
        return "/" + rel[: -len("index.html")]
    return "/" + rel[: -len(".html")]


# Inverse of pathname_for: "/x/" -> x/index.html; "/x" -> x.html if present
# (or the segment is dotted), else x/index.html.
def html_path_for(pathname: str, dist_dir) -> Path:
    dist = Path(dist_dir)
    rel = pathname.strip("/")
    if pathname.endswith("/") or not rel:
        return dist / rel / "index.html"
    flat = dist / (rel + ".html")
    if flat.exists() or "." in rel.rsplit("/", 1)[-1]:
        return flat
    return dist / rel / "index.html"


def compile_rules(cfg) -> Tuple[List[str], List[str]]:
    cfg = cfg or {}
    include = cfg.get("include_patterns") or DEFAULT_INCLUDE_PATTERNS
    exclude = cfg.get("exclude_patterns")
    if exclude is None:
        exclude = DEFAULT_EXCLUDE_PATTERNS
    return list(include), list(exclude)


def is_included(pathname: str, include: Iterable[str], exclude: Iterable[str]) -> bool:
    if not any(fnmatchcase(pathname, p) for p in include):
        return False
    return not any(fnmatchcase(pathname, p) for p in exclude)


# Walk dist_dir for *.html and return the sorted, filtered, de-duplicated routes.
def discover_pages(dist_dir, cfg=None) -> List[str]:
    include, exclude = compile_rules(cfg)
    seen, kept = set(), []
    dropped = 0
    for root, _, files in os.walk(dist_dir):
        for name in files:
            if not name.endswith(".html"):
                continue
            pathname = pathname_for(os.path.join(root, name), dist_dir)
            if not is_included(pathname, include, exclude):
                dropped += 1
                continue
            if pathname not in seen:
                seen.add(pathname)
                kept.append(pathname)
    logging.info(f"Page filter: kept={len(kept)}, dropped={dropped}")
    return sorted(kept)


def extract_page_data(html: str, pathname: str, ignore_selectors: Iterable[str] = ()) -> Dict:
    soup = BeautifulSoup(html, "lxml")

    # title: first <h1>, then <title>, then the last path segment
    h1 = soup.find("h1")
    title_tag = soup.find("title")
    title = (
        (h1.get_text().strip() if h1 is not None else "")
        or (title_tag.get_text().strip() if title_tag is not None else "")
        or next((seg for seg in reversed(pathname.split("/")) if seg), "")
        or "Untitled"
    )

    meta = soup.find("meta", attrs={"name": "description"})
    description = (meta.get("content") or "").strip() if meta is not None else ""

    # the title is rendered separately in llms-full.txt
    if h1 is not None:
        h1.decompose()
    main = soup.find("main") or soup.body or soup
    selectors = DEFAULT_IGNORE_SELECTORS + [s for s in ignore_selectors if s not in DEFAULT_IGNORE_SELECTORS]
    content = convert(main.decode_contents().strip(), selectors, False)

    return {
        "pathname": pathname,
        "title": title,
        "description": description or None,
        "content": content.strip(),
        "slug": pathname,
    }


# Read + convert every page; a page that fails is logged and skipped.
def process_pages(dist_dir, pathnames: Iterable[str], ignore_selectors: Iterable[str] = ()) -> List[Dict]:
    pathnames = list(pathnames)
    ignore_selectors = list(ignore_selectors)
    pages, fail = [], 0
    for i, pathname in enumerate(pathnames, start=1):
        try:
            html_path = html_path_for(pathname, dist_dir)
            with open(html_path, "r", encoding="utf-8") as f:
                html = f.read()
            pages.append(extract_page_data(html, pathname, ignore_selectors))
            logging.debug(f"[{i}/{len(pathnames)}] {pathname}")
        except Exception as e:
            logging.warning(f"Could not process page: {pathname}: {e}")
            fail += 1
    logging.info(f"Processed pages: ok={len(pages)}, failed={fail}")
    return sorted(pages, key=lambda p: p["pathname"])
