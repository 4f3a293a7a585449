import os

import pytest

from spreadlint.file_filter import is_excluded_path


@pytest.mark.parametrize("path, excluded", [
    ("src/components/Button.jsx", False),
    ("node_modules/react/index.js", True),
    ("app/dist/main.js", True),
    (".git/hooks/pre-commit.js", True),
    ("src/vendor.js", False),
    ("public/app.min.js", True),
    ("public/app.bundle.js", True),
    ("build.js", False),
])
def test_is_excluded_path(path, excluded):
    assert is_excluded_path(path.replace("/", os.sep)) is excluded


def test_extra_dirs():
    assert is_excluded_path(os.path.join("src", "stories", "Button.jsx"), extra_dirs=["stories"])
    assert not is_excluded_path(os.path.join("src", "stories", "Button.jsx"))
