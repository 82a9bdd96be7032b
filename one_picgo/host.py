"""Document hosts: the editing surface an upload run reads from and writes to."""

import logging
import os
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

from one_picgo.core.models import Replacement
from one_picgo.core.processor import apply_replacements

logger = logging.getLogger(__name__)


class DocumentHost(ABC):
    """Narrow interface to the document being processed."""

    @abstractmethod
    def get_document_text(self) -> str:
        ...

    @abstractmethod
    def get_document_directory(self) -> str:
        ...

    @abstractmethod
    def get_document_base_name(self) -> str:
        ...

    @abstractmethod
    def apply_batch_edit(self, replacements: Sequence[Replacement]) -> bool:
        """Apply all replacements as one edit; return False if nothing changed."""

    @abstractmethod
    def report_progress(self, increment: float, message: str) -> None:
        ...

    @abstractmethod
    def show_info(self, message: str) -> None:
        ...

    @abstractmethod
    def show_error(self, message: str) -> None:
        ...


class FileDocumentHost(DocumentHost):
    """Host backed by a Markdown file on disk.

    The text is read once at construction; edits are spliced into that
    snapshot and written back in a single write. Line endings are kept
    exactly as found in the file.
    """

    def __init__(self, path: Path, dry_run: bool = False, out=None, err=None):
        """Initialize FileDocumentHost.

        Args:
            path: Markdown file to process
            dry_run: If True, never write the file
            out: Stream for progress and info messages (default: stdout)
            err: Stream for error messages (default: stderr)
        """
        self.path = Path(path)
        self.dry_run = dry_run
        self.out = out or sys.stdout
        self.err = err or sys.stderr
        with open(self.path, 'r', encoding='utf-8', newline='') as f:
            self.text = f.read()
        self.progress = 0.0

    def get_document_text(self) -> str:
        return self.text

    def get_document_directory(self) -> str:
        return os.path.dirname(os.path.abspath(self.path))

    def get_document_base_name(self) -> str:
        return self.path.stem

    def apply_batch_edit(self, replacements: Sequence[Replacement]) -> bool:
        try:
            new_text = apply_replacements(self.text, replacements)
        except ValueError as e:
            logger.error("Rejected edit batch for %s: %s", self.path, e)
            return False

        if self.dry_run:
            logger.info("Dry run, not writing %s", self.path)
            return True

        with open(self.path, 'w', encoding='utf-8', newline='') as f:
            f.write(new_text)
        self.text = new_text
        return True

    def report_progress(self, increment: float, message: str) -> None:
        self.progress = min(100.0, self.progress + increment)
        print(f"[{self.progress:5.1f}%] {message}", file=self.out)

    def show_info(self, message: str) -> None:
        print(message, file=self.out)

    def show_error(self, message: str) -> None:
        print(f"Error: {message}", file=self.err)
