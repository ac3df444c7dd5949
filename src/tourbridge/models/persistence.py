"""JSON files holding one Pydantic model each.

The bridge keeps a single settings file. Reads turn syntax and validation
problems into ConfigurationError subclasses so the CLI can print a hint.
Writes go through ``<name>.tmp`` and a rename, and the previous contents
are kept as ``<name>.bak``, so a failed write never leaves a half-written
config behind.
"""

import logging
import shutil
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from tourbridge.exceptions import ConfigFileInvalidError, wrap_pydantic_error

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class ModelFile(Generic[T]):
    """A JSON file bound to the model type it stores."""

    def __init__(self, path: Path, model_type: type[T]) -> None:
        self.path = path
        self.model_type = model_type

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + ".bak")

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> T:
        """
        Parse and validate the file.

        Raises:
            FileNotFoundError: The file does not exist
            ConfigFileInvalidError: Empty, unreadable, or not JSON
            ConfigValidationError: JSON whose values the model rejects
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise
        except OSError as e:
            raise ConfigFileInvalidError(str(self.path), f"Unreadable file: {e}") from e

        if not text.strip():
            raise ConfigFileInvalidError(str(self.path), "File is empty")

        try:
            model = self.model_type.model_validate_json(text)
        except ValidationError as e:
            logger.error(f"{self.path} does not hold a valid {self.model_type.__name__}: {e}")
            raise wrap_pydantic_error(e, str(self.path)) from e

        logger.debug(f"Read {self.model_type.__name__} from {self.path}")
        return model

    def read_or_default(self) -> T:
        """Like read(), but a missing file gives the model's defaults."""
        try:
            return self.read()
        except FileNotFoundError:
            logger.info(f"No file at {self.path}, using default {self.model_type.__name__}")
            return self.model_type()

    def write(self, model: T) -> None:
        """
        Replace the file with ``model``.

        Raises:
            OSError: The directory or file cannot be written
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        if self.path.exists():
            shutil.copy2(self.path, self.backup_path)
            logger.debug(f"Kept previous {self.path.name} as {self.backup_path.name}")

        staging = self.path.with_name(self.path.name + ".tmp")
        try:
            staging.write_text(model.model_dump_json(indent=2), encoding="utf-8")
            staging.replace(self.path)
        finally:
            staging.unlink(missing_ok=True)

        logger.info(f"Wrote {self.model_type.__name__} to {self.path}")
