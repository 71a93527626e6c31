"""
Locating and caching class files in directories and jar/zip archives.
"""

import logging
import threading
import zipfile
from pathlib import Path
from typing import Iterator, Optional, Union

from .classfile import ClassFile
from .config import ReaderConfig

logger = logging.getLogger(__name__)

CLASS_SUFFIX = ".class"


class ClassPath:
    """Manages a classpath for looking up classes.

    Parsed classes are cached by internal name. One instance can be shared by
    several threads.
    """

    def __init__(self, config: Optional[ReaderConfig] = None):
        self.config = config
        self.entries: list[Union[Path, zipfile.ZipFile]] = []
        self._cache: dict[str, ClassFile] = {}
        self._zip_files: list[zipfile.ZipFile] = []
        self._lock = threading.Lock()

    def add_path(self, path: Union[str, Path]):
        """Add a path to the classpath (directory or jar/zip)."""
        path = Path(path)
        if path.suffix in (".jar", ".zip"):
            zf = zipfile.ZipFile(path, "r")
            self._zip_files.append(zf)
            self.entries.append(zf)
        elif path.is_dir():
            self.entries.append(path)
        else:
            raise ValueError(f"Invalid classpath entry: {path}")
        logger.debug(f"Added classpath entry {path}")

    def _read_entry(self, entry: Union[Path, zipfile.ZipFile], class_file: str) -> Optional[bytes]:
        if isinstance(entry, zipfile.ZipFile):
            try:
                with self._lock:
                    return entry.read(class_file)
            except KeyError:
                return None
        path = entry / class_file
        if path.is_file():
            return path.read_bytes()
        return None

    def find_class(self, class_name: str) -> Optional[ClassFile]:
        """Find and parse a class by internal name (e.g., 'java/lang/String')."""
        with self._lock:
            cached = self._cache.get(class_name)
        if cached is not None:
            return cached

        class_file = class_name + CLASS_SUFFIX
        for entry in self.entries:
            data = self._read_entry(entry, class_file)
            if data is None:
                continue
            info = ClassFile.from_bytes(data, self.config)
            with self._lock:
                # Another thread may have parsed it meanwhile; keep the first
                info = self._cache.setdefault(class_name, info)
            return info

        logger.debug(f"Class {class_name} not found on classpath")
        return None

    def class_names(self, package: Optional[str] = None) -> Iterator[str]:
        """Internal names of all classes on the classpath, in entry order.

        If ``package`` (internal form, e.g. ``java/util``) is given, only
        classes directly in that package are listed.
        """
        seen = set()
        for entry in self.entries:
            if isinstance(entry, zipfile.ZipFile):
                names = (n for n in entry.namelist() if n.endswith(CLASS_SUFFIX))
            else:
                names = (p.relative_to(entry).as_posix() for p in entry.rglob("*" + CLASS_SUFFIX))
            for name in names:
                name = name[:-len(CLASS_SUFFIX)]
                if package is not None and name.rpartition("/")[0] != package:
                    continue
                if name not in seen:
                    seen.add(name)
                    yield name

    def close(self):
        """Close all zip files and drop them from the classpath."""
        for zf in self._zip_files:
            zf.close()
        self.entries = [e for e in self.entries if not isinstance(e, zipfile.ZipFile)]
        self._zip_files = []

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
