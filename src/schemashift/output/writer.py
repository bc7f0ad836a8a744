"""
Script writer - atomic UTF-8 output of generated SQL scripts.

Every script is first written to a hidden temporary file next to its
destination and moved into place only once it is complete, so a failed
conversion never leaves a partial script behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, TextIO, Tuple, Union

from schemashift.models import Dialect

logger = logging.getLogger(__name__)

MYSQL_NO_BACKSLASH_ESCAPES = "SET SESSION sql_mode = CONCAT(@@sql_mode, ',NO_BACKSLASH_ESCAPES');"


class ScriptWriter:
    """
    Writes scripts under an output directory.

    Relative file names are resolved against ``output_dir``; absolute
    paths are used as given.
    """

    def __init__(
        self,
        output_dir: Union[str, Path] = ".",
        encoding: str = "utf-8",
        mysql_no_backslash_escapes: bool = True,
    ):
        self.output_dir = Path(output_dir)
        self.encoding = encoding
        self.mysql_no_backslash_escapes = mysql_no_backslash_escapes

    def resolve(self, file_name: Union[str, Path]) -> Path:
        path = Path(file_name)
        if not path.is_absolute():
            path = self.output_dir / path
        return path

    @contextmanager
    def open(self, file_name: Union[str, Path]) -> Iterator[TextIO]:
        """
        Open a script for writing; it replaces the destination on success.

        On any exception inside the block the temporary file is removed and
        the destination is left untouched.
        """
        path = self.resolve(file_name)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding=self.encoding, newline="\n") as handle:
                yield handle
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            logger.debug(f"Discarded incomplete output for {path}")
            raise
        logger.debug(f"Wrote {path}")

    def write_text(self, file_name: Union[str, Path], text: str) -> Path:
        """Write a complete script."""
        with self.open(file_name) as handle:
            handle.write(text)
        return self.resolve(file_name)

    def write_lines(
        self,
        file_name: Union[str, Path],
        lines: Iterable[str],
        on_line: Optional[Callable[[int], None]] = None,
    ) -> Tuple[Path, int]:
        """
        Write one line per item, each newline-terminated.

        Returns:
            The destination path and the number of lines written.
        """
        count = 0
        with self.open(file_name) as handle:
            for line in lines:
                handle.write(line)
                handle.write("\n")
                count += 1
                if on_line is not None:
                    on_line(count)
        return self.resolve(file_name), count

    def preamble(self, target: Dialect) -> Optional[str]:
        """Session setup statement for a data script loaded into ``target``."""
        if target is Dialect.MYSQL and self.mysql_no_backslash_escapes:
            return MYSQL_NO_BACKSLASH_ESCAPES
        return None

    def write_statements(
        self,
        file_name: Union[str, Path],
        statements: Iterable[str],
        target: Dialect,
        on_statement: Optional[Callable[[int], None]] = None,
    ) -> Tuple[Path, int]:
        """
        Write an INSERT script for ``target``, preceded by its preamble.

        Returns:
            The destination path and the number of statements written
            (the preamble is not counted).
        """
        preamble = self.preamble(target)
        count = 0
        with self.open(file_name) as handle:
            if preamble:
                handle.write(preamble + "\n")
            for statement in statements:
                handle.write(statement + "\n")
                count += 1
                if on_statement is not None:
                    on_statement(count)
        path = self.resolve(file_name)
        logger.info(f"Wrote {count} statements to {path}")
        return path, count
