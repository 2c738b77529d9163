"""Package version, read from the bundled ``VERSION`` file."""

from pathlib import Path
from typing import Final

_VERSION_PATH: Final[Path] = Path(__file__).with_name("VERSION")


def _read_version(path: Path = _VERSION_PATH) -> str:
    # Source checkouts without a VERSION file report a placeholder.
    if not path.is_file():
        return "0.0.0"
    return path.read_text(encoding="utf-8").strip()


__version__: Final[str] = _read_version()
