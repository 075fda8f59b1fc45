import json
import logging

from ingest.run_all import load_cfg, main, smart_defaults


def test_smart_defaults_from_site_and_package_json(tmp_path):
    pkg = tmp_path / "package.json"
    pkg.write_text(json.dumps({"name": "docs", "description": "From package"}), encoding="utf-8")
    cfg = smart_defaults({"site": "https://www.docs.example.org/"}, pkg)
    assert cfg["title"] == "docs.example.org"
    assert cfg["description"] == "From package"
    assert cfg["exclude_patterns"] == ["**/404*", "**/500*", "**/api/**"]
    assert cfg["include_patterns"] == ["**/*"]
    assert cfg["custom_separator"] == "\n\n---\n\n"
    assert cfg["ignore_selectors"] == []


def test_smart_defaults_fallbacks(tmp_path):
    cfg = smart_defaults({}, tmp_path / "missing.json")
    assert cfg["title"] == "Documentation"
    assert cfg["description"] == "AI-friendly documentation for Documentation"
    assert smart_defaults({"site": "my-docs"}, tmp_path / "missing.json")["title"] == "my-docs"
    explicit = smart_defaults({"title": "T", "description": "D", "site": "https://x.dev"})
    assert (explicit["title"], explicit["description"]) == ("T", "D")


def test_load_cfg_missing_file_is_empty(tmp_path):
    assert load_cfg(tmp_path / "nope.yaml") == {}


def test_main_writes_llms_files(tmp_path):
    dist = tmp_path / "dist"
    (dist / "guide").mkdir(parents=True)
    (dist / "index.html").write_text("<main><h1>Home</h1><p>Hi</p></main>", encoding="utf-8")
    (dist / "guide" / "index.html").write_text(
        '<main><h1>Guide</h1><p>Read me</p><div class="internal">x</div></main>', encoding="utf-8"
    )
    cfg_path = tmp_path / "llms.yaml"
    cfg_path.write_text(
        "title: My Docs\ndescription: All the docs\nignore_selectors:\n  - .internal\n", encoding="utf-8"
    )
    out = tmp_path / "out"

    rc = main(["--config", str(cfg_path), "--dist", str(dist), "--out", str(out)])

    assert rc == 0
    assert (out / "llms.txt").read_text(encoding="utf-8").startswith("# My Docs\n> All the docs")
    full = (out / "llms-full.txt").read_text(encoding="utf-8")
    assert "# Guide\n\nRead me" in full
    assert "x" not in full.split("# Guide", 1)[1]
    assert (out / "llms-small.txt").exists()


def test_main_missing_dist_returns_error(tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        rc = main(["--config", str(tmp_path / "none.yaml"), "--dist", str(tmp_path / "nope")])
    assert rc == 1
    assert "Missing dist directory" in caplog.text


def test_smart_defaults_scalar_ignore_selector(tmp_path):
    cfg = smart_defaults({"ignore_selectors": ".sidebar"}, tmp_path / "missing.json")
    assert cfg["ignore_selectors"] == [".sidebar"]
    assert smart_defaults({"ignore_selectors": [".a", "aside"]})["ignore_selectors"] == [".a", "aside"]


def test_main_scalar_ignore_selector_keeps_inline_markup(tmp_path):
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "index.html").write_text(
        '<main><h1>Home</h1><p>See <a href="/x">docs</a> and <b>bold</b></p>'
        '<div class="sidebar">nav junk</div></main>',
        encoding="utf-8",
    )
    cfg_path = tmp_path / "llms.yaml"
    cfg_path.write_text("ignore_selectors: .sidebar\n", encoding="utf-8")

    assert main(["--config", str(cfg_path), "--dist", str(dist), "--out", str(tmp_path)]) == 0

    full = (tmp_path / "llms-full.txt").read_text(encoding="utf-8")
    assert "See [docs](/x) and **bold**" in full
    assert "nav junk" not in full


def test_description_falls_back_to_site_host(tmp_path):
    cfg = smart_defaults({"title": "Mine", "site": "https://www.x.dev"}, tmp_path / "missing.json")
    assert cfg["title"] == "Mine"
    assert cfg["description"] == "AI-friendly documentation for x.dev"
