"""Binary records used by the transformers' save/load.

A record is laid out as

    <4sB>   kind tag and format version
    scalars kind-specific struct (e.g. <q for the SVD rank)
    .npy    the basis matrix (shape, dtype and row-major payload)

The stream belongs to the caller: it is never closed or rewound here.
"""

import logging
import struct

import numpy as np
from numpy.lib import format as npy_format

from .errors import DecodeError

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
_PREAMBLE = struct.Struct("<4sB")
_CHUNK_SIZE = 1 << 20


def write_record(writer, kind: bytes, scalar_format: str, scalars, matrix: np.ndarray):
    """Write one record to a binary stream."""
    writer.write(_PREAMBLE.pack(kind, FORMAT_VERSION))
    writer.write(struct.pack(scalar_format, *scalars))
    npy_format.write_array(writer, np.ascontiguousarray(matrix), allow_pickle=False)
    logger.debug("Wrote %s record with matrix of shape %s", kind, matrix.shape)


def read_record(reader, kind: bytes, scalar_format: str):
    """
    Read one record written by `write_record`.

    Args:
        reader: binary stream positioned at the start of the record
        kind: expected 4-byte kind tag
        scalar_format: struct format of the kind-specific scalars

    Returns:
        scalars: tuple of unpacked scalars
        matrix: the stored 2-D array

    Raises:
        DecodeError: If the record is truncated, of another kind or version,
            or does not hold a 2-D matrix
    """
    tag, version = _unpack(reader, _PREAMBLE)
    if tag != kind:
        raise DecodeError(f"Expected a {kind!r} record, found {tag!r}")
    if version != FORMAT_VERSION:
        raise DecodeError(f"Unsupported record version {version}")

    scalars = _unpack(reader, struct.Struct(scalar_format))

    matrix = _read_matrix(reader, kind)

    logger.debug("Read %s record with matrix of shape %s", kind, matrix.shape)
    return scalars, matrix


def _unpack(reader, layout: struct.Struct):
    data = reader.read(layout.size)
    if data is None or len(data) != layout.size:
        raise DecodeError(
            f"Truncated record: expected {layout.size} bytes, got {len(data or b'')}"
        )
    return layout.unpack(data)


def _read_matrix(reader, kind: bytes) -> np.ndarray:
    """
    Read a 2-D .npy record without trusting its declared size.

    The payload is read in bounded chunks before any array is allocated, so a
    corrupt header claiming a huge shape fails as a short read.
    """
    try:
        version = npy_format.read_magic(reader)
        if version == (1, 0):
            shape, fortran_order, dtype = npy_format.read_array_header_1_0(reader)
        elif version == (2, 0):
            shape, fortran_order, dtype = npy_format.read_array_header_2_0(reader)
        else:
            shape = None
    except (ValueError, EOFError) as e:
        raise DecodeError(f"Corrupt matrix header in {kind!r} record: {e}") from e

    if shape is None:
        raise DecodeError(f"Unsupported .npy version {version} in {kind!r} record")

    if len(shape) != 2:
        raise DecodeError(f"Expected a 2-D matrix, found shape {shape}")
    if dtype.kind not in "biuf":
        raise DecodeError(f"Expected a numeric matrix in {kind!r} record, found {dtype}")

    nbytes = shape[0] * shape[1] * dtype.itemsize
    payload = _read_exact(reader, nbytes)
    if len(payload) != nbytes:
        raise DecodeError(
            f"Truncated matrix payload in {kind!r} record: "
            f"expected {nbytes} bytes, got {len(payload)}"
        )

    order = "F" if fortran_order else "C"
    matrix = np.frombuffer(payload, dtype=dtype).reshape(shape, order=order)
    return np.ascontiguousarray(matrix)


def _read_exact(reader, nbytes: int) -> bytes:
    """Read up to nbytes in bounded chunks, stopping early at end of stream."""
    chunks = []
    remaining = nbytes
    while remaining > 0:
        chunk = reader.read(min(remaining, _CHUNK_SIZE))
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)
