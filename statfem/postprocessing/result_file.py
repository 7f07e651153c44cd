"""
Text result file.

Layout (one item per line unless noted)::

    FEM Solver Results File
    Mesh
    <type tag>
    <N nodes>
    x y [z]            %f followed by a space, one node per line
    <N elements>
    n0 n1 ...          %d followed by a space, one element per line
    <N boundary elements>
    n0 n1 ...
    Results
    DD.MM.YYYY - HH:MM:SS
    <N fields>
    then for every field:
        <name>
        0
        <N nodes>
        value              %0.8e, one per line

For shells the boundary section repeats the elements.
"""

import datetime
import logging

import numpy as np

from ..config import RESULT_SIGNATURE
from ..errors import FEMIOError, MeshFormatError
from ..mesh.nodes import Mesh

log = logging.getLogger(__name__)


def _connectivity_lines(conn):
    return ["".join(f"{i:d} " for i in row) for row in conn]


def format_timestamp(moment):
    return (f"{moment.day:02d}.{moment.month:02d}.{moment.year:4d} - "
            f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}")


def save_result(path, mesh, names, result, timestamp=None):
    """
    Write mesh and nodal results.

    Parameters
    ----------
    path : str
    mesh : Mesh
    names : list of str
        Field names, one per row of ``result``.
    result : ndarray, shape (len(names), N_nodes)
    timestamp : datetime.datetime, optional
        Defaults to now.

    Raises
    ------
    FEMIOError
        If the file cannot be created.
    """
    result = np.asarray(result, dtype=np.float64)
    if result.shape != (len(names), mesh.n_nodes):
        raise ValueError(
            f"result shape {result.shape} != ({len(names)}, {mesh.n_nodes})"
        )
    moment = timestamp or datetime.datetime.now()

    lines = [RESULT_SIGNATURE, "Mesh", mesh.fe_name, str(mesh.n_nodes)]
    lines += ["".join(f"{v:f} " for v in row) for row in mesh.nodes]
    lines.append(str(mesh.n_elements))
    lines += _connectivity_lines(mesh.elements)
    lines.append(str(mesh.n_boundary))
    lines += _connectivity_lines(mesh.boundary_elements)
    lines += ["Results", format_timestamp(moment), str(len(names))]
    for name, row in zip(names, result):
        lines += [name, "0", str(len(row))]
        lines += [f"{v:0.8e}" for v in row]

    try:
        with open(path, "w") as f:
            f.write("\n".join(lines) + "\n")
    except OSError as exc:
        raise FEMIOError(f"error creating result file '{path}': {exc.strerror}") from exc
    log.info("Results saved to %s", path)


class _Lines:
    def __init__(self, lines, path):
        self.lines = lines
        self.pos = 0
        self.path = path

    def next(self):
        if self.pos >= len(self.lines):
            raise MeshFormatError(f"{self.path}: unexpected end of result file")
        line = self.lines[self.pos].strip()
        self.pos += 1
        return line

    def count(self):
        line = self.next()
        try:
            return int(line)
        except ValueError:
            raise MeshFormatError(
                f"{self.path}: integer expected on line {self.pos}, got '{line}'") from None

    def expect(self, text):
        line = self.next()
        if line != text:
            raise MeshFormatError(
                f"{self.path}: '{text}' expected on line {self.pos}, got '{line}'")

    def rows(self, n, dtype):
        try:
            return np.array([self.next().split() for _ in range(n)], dtype=dtype)
        except ValueError:
            raise MeshFormatError(f"{self.path}: malformed block before line {self.pos}") from None


def load_result(path):
    """
    Read a result file written by ``save_result``.

    Returns
    -------
    mesh : Mesh
    names : list of str
    result : ndarray, shape (len(names), N_nodes)
    timestamp : str
    """
    try:
        with open(path, "r") as f:
            stream = _Lines(f.read().splitlines(), path)
    except OSError as exc:
        raise FEMIOError(f"error opening result file '{path}': {exc.strerror}") from exc

    stream.expect(RESULT_SIGNATURE)
    stream.expect("Mesh")
    tag = stream.next()
    nodes = stream.rows(stream.count(), np.float64)
    elements = stream.rows(stream.count(), np.int64)
    boundary = stream.rows(stream.count(), np.int64)
    mesh = Mesh(tag, nodes, elements, boundary)

    stream.expect("Results")
    timestamp = stream.next()
    names, rows = [], []
    for _ in range(stream.count()):
        names.append(stream.next())
        stream.expect("0")
        n = stream.count()
        rows.append(stream.rows(n, np.float64).reshape(n))
    result = np.array(rows).reshape(len(names), mesh.n_nodes)
    return mesh, names, result, timestamp
