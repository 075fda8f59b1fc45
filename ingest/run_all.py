# Description: Loads config llms.yaml, fills in smart defaults, then:
#   - discovers built HTML pages under the dist directory (include/exclude globs)
#   - converts each page's main content to LLM-friendly Markdown
#   - writes llms.txt, llms-small.txt and llms-full.txt

import argparse
import json
import logging
import os
from typing import Dict
from urllib.parse import urlparse

import yaml

from ingest.extract_pages import compile_rules, discover_pages, process_pages
from kb.build_llms import DEFAULT_SEPARATOR, write_outputs


def setup_logger(level=logging.INFO):
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S"
    )


def load_cfg(path="llms.yaml") -> Dict:
    if not os.path.exists(path):
        logging.info(f"No config at {path}, using defaults")
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def read_package_description(path="package.json") -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f).get("description") or ""
    except (OSError, ValueError, AttributeError):
        # no package.json (or not a JSON object) is normal for non-JS sites
        return ""


# Title from the site hostname, description from package.json, patterns/separator defaulted.
def smart_defaults(cfg: Dict, package_json="package.json") -> Dict:
    cfg = dict(cfg or {})

    auto_title = "Documentation"
    site = cfg.get("site")
    if site:
        host = urlparse(site).hostname
        auto_title = host[4:] if host and host.startswith("www.") else (host or site)

    title = cfg.get("title") or auto_title
    description = (
        cfg.get("description")
        or read_package_description(package_json)
        or f"AI-friendly documentation for {auto_title}"
    )
    include, exclude = compile_rules(cfg)

    # a single YAML scalar is one selector, not a list of characters
    ignore = cfg.get("ignore_selectors") or []
    if isinstance(ignore, str):
        ignore = [ignore]

    cfg.update({
        "title": title,
        "description": description,
        "include_patterns": include,
        "exclude_patterns": exclude,
        "custom_separator": cfg.get("custom_separator") or DEFAULT_SEPARATOR,
        "ignore_selectors": [str(s) for s in ignore],
    })
    return cfg


def create_parser():
    parser = argparse.ArgumentParser(
        description="Generate llms.txt, llms-small.txt and llms-full.txt from a built static site"
    )
    parser.add_argument("--config", default="llms.yaml",
                        help="YAML config file (default: llms.yaml)")
    parser.add_argument("--dist", default=None,
                        help="Directory with the built HTML (overrides paths.dist_dir)")
    parser.add_argument("--out", default=None,
                        help="Where to write the llms files (default: the dist directory)")
    parser.add_argument("--package-json", default="package.json",
                        help="package.json used for the default description")
    parser.add_argument("--verbose", action="store_true",
                        help="Debug logging")
    return parser


def main(argv=None) -> int:
    args = create_parser().parse_args(argv)
    setup_logger(logging.DEBUG if args.verbose else logging.INFO)

    cfg = smart_defaults(load_cfg(args.config), args.package_json)
    paths = cfg.get("paths") or {}
    dist_dir = args.dist or paths.get("dist_dir") or "dist"
    out_dir = args.out or paths.get("out_dir") or dist_dir

    if not os.path.isdir(dist_dir):
        logging.error(f"Missing dist directory {dist_dir}. Build the site first.")
        return 1

    pathnames = discover_pages(dist_dir, cfg)
    logging.info(f"Found {len(pathnames)} pages under {dist_dir}")
    for p in pathnames[:15]:
        logging.debug(f" - {p}")

    pages = process_pages(dist_dir, pathnames, cfg["ignore_selectors"])
    write_outputs(pages, cfg, out_dir)

    logging.info(f"Done. Pages: {len(pages)} | llms files → {out_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
