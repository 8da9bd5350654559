import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent


def _runtime_imports():
    names = set()
    for path in list((ROOT / "packages").rglob("*.py")) + list((ROOT / "apps").rglob("*.py")):
        for node in ast.walk(ast.parse(path.read_text(encoding="utf-8"))):
            if isinstance(node, ast.Import):
                names.update(a.name.split(".")[0] for a in node.names)
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                names.add(node.module.split(".")[0])
    return names


def test_numpy_is_test_only():
    pyproject = (ROOT / "pyproject.toml").read_text(encoding="utf-8")
    runtime_deps = pyproject.split("dependencies = [", 1)[1].split("]", 1)[0]
    assert "numpy" not in _runtime_imports()
    assert '"numpy"' not in runtime_deps
