"""
Tests for settings, in particular where node packages are looked up.
"""

from pathlib import Path

from addtowallet.config import Settings, default_node_packages_dir

MANIFEST = Path("official/integrations/addtowallet/pass/manifest.json")


def test_default_node_packages_dir_contains_pass_node():
    path = Settings(NODE_PACKAGES_DIR=None).node_packages_path

    assert (path / MANIFEST).is_file()


def test_bundled_node_packages_preferred(tmp_path):
    package_dir = tmp_path / "site-packages" / "addtowallet"
    (package_dir / "node_packages").mkdir(parents=True)

    assert default_node_packages_dir(package_dir) == package_dir / "node_packages"


def test_source_checkout_falls_back_to_repo_root(tmp_path):
    package_dir = tmp_path / "repo" / "addtowallet"
    package_dir.mkdir(parents=True)

    assert default_node_packages_dir(package_dir) == tmp_path / "repo" / "node_packages"


def test_explicit_directory_wins(tmp_path):
    settings = Settings(NODE_PACKAGES_DIR=tmp_path)

    assert settings.node_packages_path == tmp_path


def test_base_url_trailing_slash_stripped():
    assert Settings(BASE_URL="https://staging.example/").BASE_URL == "https://staging.example"
