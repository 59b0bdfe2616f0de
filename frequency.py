"""
Подсчёт частот байтов во входном потоке.

Поток читается блоками за один проход, в памяти хранится только
таблица из 256 счётчиков.
"""

import io
from typing import BinaryIO, Iterable, Iterator, List, Optional, Union
from collections import Counter


SYMBOL_COUNT = 256
CHUNK_SIZE = 64 * 1024


class StreamReadError(OSError):
    pass


class ByteSource:
    def __init__(self, stream: BinaryIO, chunk_size: int = CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError(f"Invalid chunk size: {chunk_size}")

        self.stream = stream
        self.chunk_size = chunk_size
        self._owns_stream = False
        self._buffer = b''
        self._pos = 0

    @classmethod
    def open(cls, path: str, chunk_size: int = CHUNK_SIZE) -> 'ByteSource':
        stream = open(path, 'rb')
        try:
            source = cls(stream, chunk_size)
        except ValueError:
            stream.close()
            raise

        source._owns_stream = True
        return source

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        if self._owns_stream:
            self.stream.close()

    def _read_chunk(self) -> bytes:
        try:
            return self.stream.read(self.chunk_size)
        except OSError as e:
            raise StreamReadError(f"Read failed: {e}") from e

    def read_byte(self) -> Optional[int]:
        # None marks the end of the stream
        if self._pos >= len(self._buffer):
            self._buffer = self._read_chunk()
            self._pos = 0
            if not self._buffer:
                return None

        value = self._buffer[self._pos]
        self._pos += 1
        return value

    def chunks(self) -> Iterator[bytes]:
        if self._pos < len(self._buffer):
            rest = self._buffer[self._pos:]
            self._buffer = b''
            self._pos = 0
            yield rest

        while True:
            chunk = self._read_chunk()
            if not chunk:
                return
            yield chunk

    def __iter__(self) -> Iterator[int]:
        while True:
            value = self.read_byte()
            if value is None:
                return
            yield value


class FrequencyCounter:
    def __init__(self):
        self._table: List[int] = [0] * SYMBOL_COUNT
        self._total = 0

    def update(self, data: Union[bytes, bytearray, memoryview, Iterable[int]]):
        counts = Counter(data)

        if not isinstance(data, (bytes, bytearray, memoryview)):
            for symbol in counts:
                if not isinstance(symbol, int) or not 0 <= symbol < SYMBOL_COUNT:
                    raise ValueError(f"Not a byte value: {symbol!r}")

        for symbol, count in counts.items():
            self._table[symbol] += count
            self._total += count

    def consume(self, source: ByteSource) -> List[int]:
        for chunk in source.chunks():
            self.update(chunk)
        return self.table

    @property
    def table(self) -> List[int]:
        return list(self._table)

    @property
    def total(self) -> int:
        return self._total


def build_frequency_table(data: Union[bytes, bytearray, Iterable[int]]) -> List[int]:
    counter = FrequencyCounter()

    if isinstance(data, (bytes, bytearray)):
        counter.consume(ByteSource(io.BytesIO(data)))
    else:
        counter.update(data)

    return counter.table
