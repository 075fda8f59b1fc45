# Description: String-level cleanup of serialized Markdown before it goes into llms*.txt.
# Pure regex rewrites, no knowledge of the HTML tree.

import re

# (pattern, replacement) in the order they are applied
CLEANUP_RULES = [
    # image syntax that leaked through inline contexts -> bare [alt]
    (re.compile(r"!\[([^\]]*)\]\([^)]+\)"), r"[\1]"),
    # standalone image reference lines
    (re.compile(r"^\s*!\[[^\]]*\]\([^)]+\)\s*$", re.MULTILINE), ""),
    # 3+ newlines -> one blank line
    (re.compile(r"\n{3,}"), "\n\n"),
    # empty links
    (re.compile(r"\[\]\([^)]*\)"), ""),
    # links with an empty target -> just the text
    (re.compile(r"\[([^\]]+)\]\(\s*\)"), r"\1"),
    # leftover HTML comments
    (re.compile(r"<!--[\s\S]*?-->"), ""),
    # trailing spaces/tabs on every line
    (re.compile(r"[ \t]+$", re.MULTILINE), ""),
    # line endings
    (re.compile(r"\r\n?"), "\n"),
]


def _apply_rules(text: str) -> str:
    for pattern, repl in CLEANUP_RULES:
        text = pattern.sub(repl, text)
    return text.strip()


def cleanup_markdown(markdown: str) -> str:
    """Apply CLEANUP_RULES and trim the document.

    A later rule can expose work for an earlier one (stripping trailing spaces
    can leave three newlines in a row), so the pass repeats until the text is
    stable. Each rule either removes characters or replaces a carriage return,
    so the loop terminates.
    """
    text = markdown or ""
    while True:
        cleaned = _apply_rules(text)
        if cleaned == text:
            return cleaned
        text = cleaned
