# Description: CSS selector helpers used by the HTML -> Markdown stages.
# Thin layer over soupsieve (the engine behind BeautifulSoup.select) that
# never raises for bad selectors: an empty, unparsable or unsupported selector
# (pseudo-elements such as ::before) matches nothing.

from __future__ import annotations
import logging
from functools import lru_cache
from typing import List

import soupsieve
from bs4 import BeautifulSoup, Tag


@lru_cache(maxsize=256)
def compile_selector(selector: str):
    if not selector or not selector.strip():
        return None
    try:
        return soupsieve.compile(selector)
    except (soupsieve.SelectorSyntaxError, NotImplementedError) as e:
        # ::before and friends raise NotImplementedError; cached, so this warns once per selector
        logging.warning(f"Ignoring invalid selector {selector!r}: {e}")
        return None


# The BeautifulSoup object is the container of the fragment, never a match.
def _is_element(node) -> bool:
    return isinstance(node, Tag) and not isinstance(node, BeautifulSoup)


def matches(selector: str, node) -> bool:
    compiled = compile_selector(selector)
    if compiled is None or not _is_element(node):
        return False
    return compiled.match(node)


# depth-first, document order, root included when it matches itself
def select_all(selector: str, root) -> List[Tag]:
    compiled = compile_selector(selector)
    if compiled is None or not isinstance(root, Tag):
        return []
    found = [root] if _is_element(root) and compiled.match(root) else []
    found.extend(compiled.select(root))
    return found


def select_first(selector: str, root) -> Tag | None:
    compiled = compile_selector(selector)
    if compiled is None or not isinstance(root, Tag):
        return None
    if _is_element(root) and compiled.match(root):
        return root
    return compiled.select_one(root)
