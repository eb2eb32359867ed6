# Released under MIT License.
# Copyright (c) 2025 The ankh developers

"""
Persisted defaults files.

A defaults file is a flat text file of `key=value` lines, compatible with the
`*.vars` files sourced by the Proxmox helper shell scripts. There is one global
file and one optional file per application. Files are only written when the
operator explicitly asks for it, and every write replaces the whole file.
"""

import os
import re
import tempfile
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Self

from ankh_lib.core.common import normalize
from ankh_lib.core.config import CFG
from ankh_lib.core.error import AnkhDefaultsFileError
from ankh_lib.core.logger import get_logger

logger = get_logger(__name__)

# version of the file format written by ankh
FORMAT_VERSION = 1

_LINE_PATTERN = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=(.*)$")
_NEEDS_QUOTES = re.compile(r"[\s#'\"\\$`]")


class Scope(Enum):
    """
    Scope of a defaults file.
    """

    GLOBAL = 1
    APP = 2

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def fromStr(cls, s: str) -> Self:
        """
        Convert a string to the corresponding Scope.

        Raises:
            AnkhDefaultsFileError: If the string is not a valid scope.
        """
        try:
            return cls[s.strip().upper()]
        except KeyError as e:
            raise AnkhDefaultsFileError(
                f"Unknown defaults scope '{s}'. Use 'app' or 'global'."
            ) from e


class DefaultsFile:
    """
    A single defaults file on disk.
    """

    def __init__(self, path: Path, scope: Scope, app: str | None = None):
        """
        Args:
            path (Path): Location of the file.
            scope (Scope): Whether the file holds global or per-app defaults.
            app (str | None): Application the file belongs to. Only for Scope.APP.
        """
        self.path = path
        self.scope = scope
        self.app = app
        self._values: dict[str, str] | None = None

    def exists(self) -> bool:
        """Whether the file exists."""
        return self.path.is_file()

    def load(self) -> dict[str, str]:
        """
        Read the file. The result is cached; a missing file yields no values.

        Returns:
            dict[str, str]: Raw key -> value mapping as written in the file.

        Raises:
            AnkhDefaultsFileError: If the file cannot be read or contains a malformed line.
        """
        if self._values is not None:
            return self._values

        if not self.exists():
            logger.debug(f"Defaults file '{self.path}' does not exist.")
            self._values = {}
            return self._values

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise AnkhDefaultsFileError(
                f"Could not read defaults file '{self.path}': {e}."
            ) from e

        self._values = DefaultsFile.parse(text, self.path)
        logger.debug(f"Loaded {len(self._values)} value(s) from '{self.path}'.")
        return self._values

    def get(self, key: str) -> str | None:
        """Return the raw value of a key or None if the key is absent."""
        return self.load().get(key)

    def save(self, values: Mapping[str, str]) -> None:
        """
        Replace the whole file with the provided values.

        The new content is written into a temporary file in the same directory
        which is then renamed over the target.

        Args:
            values (Mapping[str, str]): Key -> textual value mapping to write.

        Raises:
            AnkhDefaultsFileError: If the file cannot be written.
        """
        content = DefaultsFile.render(values, self._header())

        tmp_path: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                delete=False,
            ) as tmp:
                tmp.write(content)
                tmp_path = Path(tmp.name)
            tmp_path.chmod(0o644)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise AnkhDefaultsFileError(
                f"Could not write defaults file '{self.path}': {e}."
            ) from e

        self._values = dict(values)
        logger.debug(f"Wrote {len(values)} value(s) into '{self.path}'.")

    @staticmethod
    def parse(text: str, source: Path | str = "<string>") -> dict[str, str]:
        """
        Parse the content of a defaults file.

        Blank lines and lines starting with '#' are ignored. A leading `export`
        is allowed. Values may be enclosed in single or double quotes.

        Args:
            text (str): Content of the file.
            source (Path | str): Name of the file, used in error messages.

        Returns:
            dict[str, str]: Parsed key -> value mapping. Later lines override earlier ones.

        Raises:
            AnkhDefaultsFileError: If a line is not a valid `key=value` assignment.
        """
        values: dict[str, str] = {}
        for number, line in enumerate(text.splitlines(), start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue

            if not (match := _LINE_PATTERN.match(stripped)):
                raise AnkhDefaultsFileError(
                    f"Malformed line {number} in defaults file '{source}': {line}"
                )

            key, raw = match.groups()
            try:
                values[key] = DefaultsFile._unquote(raw.strip())
            except ValueError as e:
                raise AnkhDefaultsFileError(
                    f"Malformed value on line {number} in defaults file '{source}': {e}."
                ) from e

        return values

    @staticmethod
    def render(values: Mapping[str, str], header: str = "") -> str:
        """
        Render key -> value pairs as the content of a defaults file.
        """
        lines = [f"# {line}" if line else "#" for line in header.splitlines()]
        for key, value in values.items():
            lines.append(f"{key}={DefaultsFile._quote(value)}")
        return "\n".join(lines) + "\n"

    def _header(self) -> str:
        scope = f"app '{self.app}'" if self.scope == Scope.APP else "global"
        return (
            f"ankh defaults file (format {FORMAT_VERSION}), {scope}\n"
            f"written {datetime.now().strftime(CFG.date_formats.standard)}"
        )

    @staticmethod
    def _quote(value: str) -> str:
        if value and not _NEEDS_QUOTES.search(value):
            return value
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    @staticmethod
    def _unquote(raw: str) -> str:
        if raw.startswith('"'):
            if len(raw) < 2 or not raw.endswith('"'):
                raise ValueError("unterminated double quote")
            return re.sub(r"\\(.)", r"\1", raw[1:-1])

        if raw.startswith("'"):
            if len(raw) < 2 or not raw.endswith("'"):
                raise ValueError("unterminated single quote")
            return raw[1:-1]

        # unquoted values end at an inline comment
        return re.split(r"\s+#", raw, maxsplit=1)[0].strip()

    def __repr__(self) -> str:
        return f"DefaultsFile({str(self.path)!r}, {self.scope})"


class DefaultsStore:
    """
    The set of defaults files under one base directory.

    The store is created explicitly and handed to the resolver; nothing in
    ankh reads defaults files behind its back.
    """

    def __init__(self, base_dir: Path):
        """
        Args:
            base_dir (Path): Directory holding the global file and the per-app directory.
        """
        self.base_dir = Path(base_dir)
        self._global = DefaultsFile(
            self.base_dir / CFG.paths.global_defaults, Scope.GLOBAL
        )
        self._apps: dict[str, DefaultsFile] = {}

    @classmethod
    def fromConfig(cls) -> Self:
        """Create a store in the directory given by the ankh configuration."""
        return cls(CFG.defaultsDir())

    def globalFile(self) -> DefaultsFile:
        """Return the global defaults file."""
        return self._global

    def appFile(self, app: str) -> DefaultsFile:
        """Return the defaults file of the given application."""
        slug = normalize(app)
        if slug not in self._apps:
            self._apps[slug] = DefaultsFile(
                self.base_dir
                / CFG.paths.app_defaults_dir
                / f"{slug}{CFG.paths.defaults_suffix}",
                Scope.APP,
                slug,
            )
        return self._apps[slug]

    def file(self, scope: Scope, app: str | None = None) -> DefaultsFile:
        """
        Return the defaults file of the given scope.

        Raises:
            AnkhDefaultsFileError: If an app-scoped file is requested without an application.
        """
        if scope == Scope.GLOBAL:
            return self._global
        if not app:
            raise AnkhDefaultsFileError(
                "An application is required for app-scoped defaults."
            )
        return self.appFile(app)
