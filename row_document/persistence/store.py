"""ConfigStore - saves and loads definitions in either encoding."""

from __future__ import annotations

from pathlib import Path

from row_document.core.definition import OutputDefinition
from row_document.core.exceptions import ConfigParseError
from row_document.persistence import attributes, markup
from row_document.persistence.attributes import AttributeStore, InMemoryAttributeStore


class ConfigStore:
    """Persists OutputDefinitions as markup files or in an attribute store.

    The two encodings are independent: a definition saved in one is loaded
    from the same one. Both reproduce the saved definition exactly.

    Args:
        attribute_store: Backend for the flat encoding. Defaults to an
            in-memory store.
    """

    def __init__(self, attribute_store: AttributeStore | None = None) -> None:
        self._attribute_store = attribute_store if attribute_store is not None else InMemoryAttributeStore()

    @property
    def attribute_store(self) -> AttributeStore:
        return self._attribute_store

    def save_markup(self, definition: OutputDefinition, path: Path | str) -> Path:
        """Write the markup encoding of *definition* to *path*."""
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(markup.encode_markup(definition), encoding="utf-8")
        return file_path

    def load_markup(self, path: Path | str) -> OutputDefinition:
        """Read a definition from a markup file.

        Raises:
            ConfigParseError: If the file is missing or its content is invalid.
        """
        file_path = Path(path)
        try:
            text = file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigParseError(str(file_path), str(e)) from e
        return markup.decode_markup(text)

    def save_attributes(self, definition: OutputDefinition, step_id: str) -> None:
        attributes.save_attributes(definition, self._attribute_store, step_id)

    def load_attributes(self, step_id: str) -> OutputDefinition:
        return attributes.load_attributes(self._attribute_store, step_id)
