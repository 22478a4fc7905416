from __future__ import annotations

import abc
import gzip
import io


class FileReader(abc.ABC):
    """
    Reads the whole content of a log file as a str. Use as a context manager,
    so that the underlying file is closed however the read turns out:

        with FileReader.get_reader(fname, "utf-8") as reader:
            text = reader.read_text()
    """
    @classmethod
    def get_reader(cls, name: str, encoding: str) -> FileReader:
        for subcls in cls.__subclasses__():
            if subcls is TextFileReader:
                continue
            if subcls._can_read(name):
                return subcls(name, encoding)
        return TextFileReader(name, encoding)

    @classmethod
    @abc.abstractmethod
    def _can_read(cls, fname: str) -> bool:
        """Override in subclasses"""

    @abc.abstractmethod
    def _open_reader(self) -> io.TextIOBase:
        """Override in subclasses"""

    def __init__(self, file_name: str, encoding: str):
        self.file_name = file_name
        self.encoding = encoding
        self._close_obj = None

    def __enter__(self):
        self._close_obj = self._open_reader()
        return self

    def __exit__(self, *exc_info):
        self._close_reader()

    def read_text(self) -> str:
        if self._close_obj is None:
            raise ValueError(f"reader for {self.file_name!r} is not open")
        return self._close_obj.read()

    def _close_reader(self):
        if self._close_obj is not None:
            self._close_obj.close()
            self._close_obj = None


class TextFileReader(FileReader):
    @classmethod
    def _can_read(cls, fname: str) -> bool:
        return True

    def _open_reader(self) -> io.TextIOBase:
        return open(self.file_name, encoding=self.encoding)


class GzipFileReader(FileReader):
    @classmethod
    def _can_read(cls, fname: str) -> bool:
        return fname.endswith(".gz")

    def _open_reader(self) -> io.TextIOBase:
        return gzip.open(self.file_name, "rt", encoding=self.encoding)


def read_log_file(file_name: str, encoding: str) -> str:
    with FileReader.get_reader(file_name, encoding) as reader:
        return reader.read_text()
