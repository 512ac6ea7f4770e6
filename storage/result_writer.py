# file: storage/result_writer.py
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Mapping, Union

from validation.models import ValidationResult

logger = logging.getLogger("storage.result_writer")


class StorageError(Exception):
    """Exception raised for storage-related errors."""
    pass


class ResultWriter:
    """
    Writes validation results as JSONL, one line per validated file.

    Features:
    - Atomic writes using temp file + rename
    - Explicit error handling (no silent swallowing)
    """

    def __init__(self, output_path: Union[str, Path]):
        self.output_path = Path(output_path)
        self._write_count = 0

    def _ensure_dir(self) -> None:
        """Ensure output directory exists."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

    def _atomic_write(self, data_str: str) -> None:
        """Write to a temp file in the target directory, then rename over the target."""
        fd, temp_path = tempfile.mkstemp(
            dir=self.output_path.parent,
            prefix=".tmp_",
            suffix=".jsonl"
        )

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as temp_file:
                temp_file.write(data_str)
                temp_file.flush()
                os.fsync(temp_file.fileno())  # Force write to disk
            os.replace(temp_path, self.output_path)
        except BaseException:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def write_results(self, results: Mapping[str, ValidationResult]) -> Path:
        """
        Write all results, replacing any previous output.

        Raises:
            StorageError: If the write fails
        """
        lines = []
        for file_name, result in results.items():
            payload = {"file": file_name}
            payload.update(result.model_dump(mode="json"))
            lines.append(json.dumps(payload, ensure_ascii=False, default=str))

        try:
            self._ensure_dir()
            self._atomic_write("".join(line + "\n" for line in lines))
            self._write_count += len(lines)
        except OSError as e:
            logger.error(f"Failed to write results: {e}")
            raise StorageError(f"Failed to write results to {self.output_path}: {e}") from e

        logger.info(f"Wrote {len(lines)} results to {self.output_path}")
        return self.output_path

    @property
    def stats(self) -> dict:
        """Return write statistics."""
        return {
            "writes": self._write_count,
            "output_path": str(self.output_path),
        }
