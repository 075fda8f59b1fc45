# Description: Convert rendered HTML pages to the restricted Markdown used in llms*.txt.
# Parse (lxml) -> fixed list of tree stages -> markdownify -> string cleanup.
# Drops media and decoration; flattens tabs, file trees and tables;
# keeps code blocks fenced with their language.

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Iterable, Tuple

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString
from markdownify import ASTERISK, ATX, UNDERSCORE, MarkdownConverter, abstract_inline_conversion

from ingest.css_select import matches, select_all, select_first
from ingest.markdown_cleanup import cleanup_markdown

# Media and decoration that never reaches an LLM
LLMS_EXCLUDED_SELECTORS = [
    "img", "picture", "figure", "svg", "canvas",
    "video", "audio", "iframe", "object", "embed",
    ".image", ".photo", ".gallery", ".media",
]

# Tags kept by the structure-only skeleton
STRUCTURE_SELECTORS = ["h2", "h3", "h4", "h5", "h6", "ul", "ol", "li"]

LANGUAGE_HINT_ATTR = "data-language"
DIFF_LINE_SELECTOR = "div.ec-line.ins, div.ec-line.del"
DIFF_TEXT_SELECTOR = "span:not(.indent)"

TABS_SELECTOR = "starlight-tabs"
TAB_SELECTOR = '[role="tab"]'
TAB_PANEL_SELECTOR = '[role="tabpanel"]'

FILE_TREE_SELECTOR = "starlight-file-tree"
SR_ONLY_SELECTOR = ".sr-only"


@dataclass(frozen=True)
class PipelineContext:
    ignore_selectors: Tuple[str, ...] = ()
    only_structure: bool = False


def parse(html: str) -> BeautifulSoup:
    """Parse an HTML fragment leniently.

    lxml always builds a full document; the implicit html/head/body wrappers
    are unwrapped so the soup's children are the fragment's own top-level nodes.
    """
    soup = BeautifulSoup(html or "", "lxml")
    for name in ("html", "head", "body"):
        wrapper = soup.find(name)
        if wrapper is not None:
            wrapper.unwrap()
    return soup


# ---------- tree helpers ----------

def _is_text(node) -> bool:
    # comments, CDATA, doctypes are PreformattedString subclasses
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def add_class(tag: Tag, token: str) -> None:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    classes = list(classes)
    if token not in classes:
        classes.append(token)
    tag["class"] = classes


def _remove_matching(root: Tag, selectors: Iterable[str]) -> int:
    # collect first: removal is a union over all selectors
    doomed = []
    for selector in selectors:
        doomed.extend(select_all(selector, root))
    removed = 0
    for node in doomed:
        # already gone with an ancestor matched by another selector
        if node.decomposed:
            continue
        node.decompose()
        removed += 1
    return removed


def text_content(node) -> str:
    if _is_text(node):
        return str(node)
    if isinstance(node, Tag):
        return " ".join(text_content(child) for child in node.children)
    return ""


# ---------- stages ----------

def remove_llms_incompatible(soup: BeautifulSoup, ctx: PipelineContext) -> None:
    _remove_matching(soup, LLMS_EXCLUDED_SELECTORS)


def remove_user_specified(soup: BeautifulSoup, ctx: PipelineContext) -> None:
    _remove_matching(soup, ctx.ignore_selectors)


def _prune_to_structure(parent: Tag) -> None:
    for child in list(parent.children):
        if any(matches(sel, child) for sel in STRUCTURE_SELECTORS):
            _prune_to_structure(child)
        else:
            child.extract()


def keep_only_structure(soup: BeautifulSoup, ctx: PipelineContext) -> None:
    # Literal rule: a node survives only if its own tag is structural. Text runs
    # inside a kept heading are not structural, so headings come out empty.
    if ctx.only_structure:
        _prune_to_structure(soup)


def _mark_diff_line(line: Tag) -> None:
    marker = "+" if "ins" in (line.get("class") or []) else "-"
    span = select_first(DIFF_TEXT_SELECTOR, line)
    if span is None or not span.contents:
        return
    first = span.contents[0]
    if _is_text(first):
        first.replace_with(NavigableString(marker + str(first)))


def tag_code_languages(soup: BeautifulSoup, ctx: PipelineContext) -> None:
    for pre in select_all("pre", soup):
        language = pre.get(LANGUAGE_HINT_ATTR)
        if not language:
            continue
        code = select_first("code", pre)
        if code is None:
            continue

        diff_lines = []
        if language != "diff":
            diff_lines = [child for child in code.children if matches(DIFF_LINE_SELECTOR, child)]
        if not diff_lines:
            add_class(code, f"language-{language}")
            continue

        add_class(code, "language-diff")
        for line in diff_lines:
            _mark_diff_line(line)


def flatten_tabs(soup: BeautifulSoup, ctx: PipelineContext) -> None:
    for instance in select_all(TABS_SELECTOR, soup):
        tabs = select_all(TAB_SELECTOR, instance)
        panels = select_all(TAB_PANEL_SELECTOR, instance)

        # the widget becomes an empty <ul>; panels live on detached until re-attached
        instance.name = "ul"
        instance.attrs = {}
        instance.clear()

        for tab, panel in zip(tabs, panels):
            # direct text only: icons and nested markup are dropped
            label = "".join(c.strip() for c in tab.children if _is_text(c) and c.strip())
            item = soup.new_tag("li")
            para = soup.new_tag("p")
            para.append(NavigableString(label))
            item.append(para)
            item.append(panel)
            instance.append(item)


def clean_file_trees(soup: BeautifulSoup, ctx: PipelineContext) -> None:
    for tree in select_all(FILE_TREE_SELECTOR, soup):
        for node in select_all(SR_ONLY_SELECTOR, tree):
            if node is not tree and not node.decomposed:
                node.decompose()


def remove_empty_list_items(soup: BeautifulSoup, ctx: PipelineContext) -> None:
    for lst in select_all("ul, ol", soup):
        for item in lst.find_all("li", recursive=False):
            if not item.contents:
                item.decompose()


def flatten_tables(soup: BeautifulSoup, ctx: PipelineContext) -> None:
    for table in select_all("table", soup):
        rows = []
        for row in select_all("tr", table):
            cells = [text_content(cell).strip() for cell in select_all("td, th", row)]
            cells = [c for c in cells if c]
            if cells:
                rows.append(" | ".join(cells))

        table.name = "div"
        table.attrs = {}
        table.clear()
        if rows:
            table.append(NavigableString("\n".join(rows)))


STAGES = [
    remove_llms_incompatible,
    remove_user_specified,
    keep_only_structure,
    tag_code_languages,
    flatten_tabs,
    clean_file_trees,
    remove_empty_list_items,
    flatten_tables,
]


def run_stages(soup: BeautifulSoup, ctx: PipelineContext) -> BeautifulSoup:
    for stage in STAGES:
        stage(soup, ctx)
    return soup


# ---------- serializer ----------

def code_language_for(pre: Tag) -> str | None:
    code = pre.find("code")
    if code is None:
        return None
    for token in code.get("class") or []:
        if token.startswith("language-"):
            return token[len("language-"):]
    return None


class LlmsMarkdownConverter(MarkdownConverter):
    class Options(MarkdownConverter.DefaultOptions):
        heading_style = ATX
        bullets = "-"
        strong_em_symbol = ASTERISK
        escape_underscores = False
        code_language_callback = code_language_for

    # bold stays **x**, italics use underscores
    convert_em = abstract_inline_conversion(lambda self: UNDERSCORE)
    convert_i = convert_em

    def convert_div(self, el, text, parent_tags):
        # block lines inside a code block (e.g. Expressive Code) are one line each
        if "pre" in parent_tags:
            return text if text.endswith("\n") else text + "\n"
        return super().convert_div(el, text, parent_tags)

    convert_article = convert_div
    convert_section = convert_div

    def convert_li(self, el, text, parent_tags):
        parent = el.parent
        if parent is None or parent.name != "ol":
            return super().convert_li(el, text, parent_tags)

        text = (text or "").strip()
        if not text:
            return "\n"
        # every item repeats the start number; renderers do the counting
        start = str(parent.get("start") or "")
        bullet = "%s. " % (int(start) if start.isnumeric() else 1)
        indent = " " * len(bullet)
        lines = text.split("\n")
        body = [lines[0]] + [indent + line if line else "" for line in lines[1:]]
        return bullet + "\n".join(body) + "\n"

    def convert_input(self, el, text, parent_tags):
        # GFM task list items
        if el.get("type") == "checkbox":
            return "[x] " if el.has_attr("checked") else "[ ] "
        return ""


def to_markdown(soup: BeautifulSoup) -> str:
    return LlmsMarkdownConverter().convert_soup(soup)


# ---------- public API ----------

def convert(html: str, ignore_selectors: Iterable[str] = (), only_structure: bool = False) -> str:
    if not html or not html.strip():
        return ""
    ctx = PipelineContext(tuple(ignore_selectors or ()), bool(only_structure))
    soup = run_stages(parse(html), ctx)
    return cleanup_markdown(to_markdown(soup))


def extract_text_only(html: str) -> str:
    # body text only (no <title>), media dropped, whitespace collapsed
    soup = BeautifulSoup(html or "", "lxml")
    root = soup.body or soup
    _remove_matching(root, LLMS_EXCLUDED_SELECTORS)
    return re.sub(r"\s+", " ", root.get_text(" ")).strip()
