"""
Output writer for generated files.
Writes rendered modules under an output root, leaving unchanged files untouched.
"""
from pathlib import Path
from typing import Iterable, List, Union
from core.syntax import GeneratedFile
from utils.logger import Logger

class Output:
    """
    Stateless output handler.
    Files whose content already matches are not rewritten, so build tools
    watching the output tree only see real changes.
    """
    def __init__(self, logger: Logger):
        self._logger = logger

    def write(self, files: Iterable[GeneratedFile], root: Union[str, Path]) -> List[Path]:
        """
        Write generated files under a root directory.

        Args:
            files: Files with paths relative to the root
            root: Output root directory, created when missing

        Returns:
            Paths of the files actually written
        """
        root = Path(root)
        written: List[Path] = []
        try:
            for generated in files:
                path = root / generated.path
                if path.is_file() and path.read_text(encoding="utf-8") == generated.content:
                    self._logger.log_debug(f"Unchanged: {generated.path}", "output")
                    continue
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(generated.content, encoding="utf-8")
                written.append(path)
        except OSError as e:
            self._logger.log_error(f"Error writing output: {e}", "output", {"root": str(root)})
            raise

        self._logger.log_info(f"Wrote {len(written)} files", "output", {"root": str(root)})
        return written
