"""Guardrails to keep kernel free of side effects and OS-specific dependencies."""

import re
from pathlib import Path


FORBIDDEN_PATTERNS = {
    "argparse": re.compile(r"\bargparse\b"),
    "pathlib.Path": re.compile(r"\bpathlib\.Path\b"),
    "open(": re.compile(r"(?<![A-Za-z0-9_])open\s*\("),
    "print(": re.compile(r"(?<![A-Za-z0-9_])print\s*\("),
    "import warnings": re.compile(r"^\s*import warnings\b", re.MULTILINE),
    "datetime.now": re.compile(r"\bdatetime\.now\b"),
    "time.time": re.compile(r"\btime\.time\b"),
    "os.path": re.compile(r"\bos\.path\b"),
    "subprocess": re.compile(r"\bsubprocess\b"),
}


def test_kernel_has_no_forbidden_tokens():
    kernel_dir = Path(__file__).resolve().parents[1] / "src" / "assocdoc" / "kernel"
    offenders = []

    for path in kernel_dir.glob("*.py"):
        contents = path.read_text(encoding="utf-8")
        for token, pattern in FORBIDDEN_PATTERNS.items():
            if pattern.search(contents):
                offenders.append(f"{path.name}: {token}")

    assert list(kernel_dir.glob("*.py")), "kernel package should contain modules"
    assert not offenders, "Forbidden kernel tokens found: " + ", ".join(offenders)


# The kernel sits below the public surface: no imports of the API, the CLI,
# the inventory gatherers or the logging setup.
FORBIDDEN_KERNEL_IMPORTS = re.compile(
    r"^\s*(?:from|import)\s+assocdoc\.(?:api|cli|inventory|_internal\.logging)\b",
    re.MULTILINE,
)


def test_kernel_does_not_import_outer_layers():
    kernel_dir = Path(__file__).resolve().parents[1] / "src" / "assocdoc" / "kernel"
    offenders = [
        path.name
        for path in kernel_dir.glob("*.py")
        if FORBIDDEN_KERNEL_IMPORTS.search(path.read_text(encoding="utf-8"))
    ]
    assert not offenders, "Kernel modules import outer layers: " + ", ".join(offenders)


def test_kernel_never_configures_logging():
    """Kernel modules only obtain loggers; configuration belongs to the caller."""
    kernel_dir = Path(__file__).resolve().parents[1] / "src" / "assocdoc" / "kernel"
    for path in kernel_dir.glob("*.py"):
        contents = path.read_text(encoding="utf-8")
        assert "structlog.configure" not in contents, path.name
        assert "logging.basicConfig" not in contents, path.name


def test_importing_kernel_has_no_logging_side_effects():
    import logging

    handlers_before = list(logging.getLogger().handlers)
    import assocdoc.kernel.normalizer  # noqa: F401
    assert list(logging.getLogger().handlers) == handlers_before
