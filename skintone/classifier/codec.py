"""Compact fixed-point binary format for linear SVM models.

Layout (all integers are 4-byte little-endian signed)::

    number_of_inputs
    number_of_support_vectors
    for each support vector: length, then `length` encoded doubles
    number_of_weights, then that many encoded doubles
    threshold (one encoded double)

A double is stored as ``round(value * 1e9)``, so only magnitudes up to 1 fit
and precision stops at nine decimal places. There is no header or version
field: any layout change breaks existing model files.
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import List

from skintone.classifier.svm import SupportVectorMachine

LOGGER = logging.getLogger("skintone.classifier.codec")

DOUBLE_TO_INT_MULTIPLIER = 1_000_000_000.0
_INT = struct.Struct("<i")


class BinaryWriter:
    """Accumulates little-endian 4-byte integers."""

    def __init__(self) -> None:
        self._data = bytearray()

    def write_int(self, value: int) -> None:
        try:
            self._data += _INT.pack(value)
        except struct.error as exc:
            raise ValueError(f"{value} does not fit in a 4-byte signed integer") from exc

    def write_double(self, value: float) -> None:
        if abs(value) > 1:
            raise ValueError(f"Only values with magnitude no larger than one can be stored (got {value})")
        self.write_int(int(round(value * DOUBLE_TO_INT_MULTIPLIER)))

    def to_bytes(self) -> bytes:
        return bytes(self._data)


class BinaryReader:
    """Reads little-endian 4-byte integers sequentially from a byte string."""

    def __init__(self, data: bytes) -> None:
        if data is None:
            raise ValueError("data is required")
        self._data = bytes(data)
        self._position = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._position

    def read_int(self) -> int:
        if self.remaining < _INT.size:
            raise ValueError(
                f"Unexpected end of data at byte {self._position} (needed {_INT.size}, {self.remaining} left)"
            )
        (value,) = _INT.unpack_from(self._data, self._position)
        self._position += _INT.size
        return value

    def read_count(self) -> int:
        value = self.read_int()
        if value < 0:
            raise ValueError(f"Negative count {value} at byte {self._position - _INT.size}")
        return value

    def read_double(self) -> float:
        return self.read_int() / DOUBLE_TO_INT_MULTIPLIER


def serialise(svm: SupportVectorMachine) -> bytes:
    if svm is None:
        raise ValueError("svm is required")
    writer = BinaryWriter()
    writer.write_int(svm.number_of_inputs)
    writer.write_int(len(svm.support_vectors))
    for vector in svm.support_vectors:
        writer.write_int(len(vector))
        for value in vector:
            writer.write_double(float(value))
    writer.write_int(len(svm.weights))
    for weight in svm.weights:
        writer.write_double(float(weight))
    writer.write_double(svm.threshold)
    return writer.to_bytes()


def deserialise(data: bytes) -> SupportVectorMachine:
    reader = BinaryReader(data)
    number_of_inputs = reader.read_int()
    support_vectors: List[List[float]] = []
    for _ in range(reader.read_count()):
        length = reader.read_count()
        support_vectors.append([reader.read_double() for _ in range(length)])
    weights = [reader.read_double() for _ in range(reader.read_count())]
    threshold = reader.read_double()
    if reader.remaining:
        LOGGER.warning("Ignoring %d trailing byte(s) after model data", reader.remaining)
    return SupportVectorMachine.from_lists(number_of_inputs, support_vectors, weights, threshold)


def save_model(path: Path, svm: SupportVectorMachine) -> None:
    data = serialise(svm)
    path.write_bytes(data)
    LOGGER.info("Wrote model %s (%d support vectors, %d bytes)", path, len(svm.support_vectors), len(data))


def load_model(path: Path) -> SupportVectorMachine:
    svm = deserialise(path.read_bytes())
    LOGGER.info(
        "Loaded model %s (inputs=%d support_vectors=%d)",
        path,
        svm.number_of_inputs,
        len(svm.support_vectors),
    )
    return svm
