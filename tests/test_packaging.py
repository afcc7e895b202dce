from pathlib import Path

from setuptools import find_packages

SRC = Path(__file__).resolve().parents[1] / "src"


def test_every_subpackage_is_installed():
    packages = find_packages(str(SRC))
    assert "dashlist" in packages
    assert "dashlist.routers" in packages
