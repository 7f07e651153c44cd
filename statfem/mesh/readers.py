"""
Mesh file readers and writer.

Supported formats (chosen by file extension, case-insensitive):

    .mesh   native whitespace-separated format
    .vol    Netgen volume mesh (tetrahedra with triangular boundary faces)
    .msh    Gmsh (lines, triangles, tetrahedra)

Native format, all tokens separated by arbitrary whitespace::

    <tag>                      fe1d2 | fe2d3 | fe2d4 | fe3d4 | fe3d8 | fe3d3s | fe3d4s
    <N>                        number of nodes
    x y [z]  (N times)         dim coordinates per node
    <M>                        number of elements
    n0 n1 ... (M times)        fe_size 0-based node indices
    <K>                        number of boundary elements (absent for shells)
    n0 n1 ... (K times)        be_size 0-based node indices

The .vol and .msh files are parsed by meshio and these rules are applied
to its points and cells. Gmsh dimensionality is detected from the
coordinates: if every node has |z| <= 1e-10 the mesh is planar (triangles
are elements, lines are boundary); otherwise tetrahedra are elements and
triangles are boundary faces. A 3D mesh without tetrahedra becomes a
ShellTri3 mesh built from its triangles.
"""

import logging
import os

import meshio
import numpy as np

from ..config import MSH_PLANAR_EPS
from ..elements.types import FE_INFO, SHELL_TYPES, FeType
from ..errors import ConfigError, FEMIOError, MeshFormatError
from .nodes import Mesh

log = logging.getLogger(__name__)


def _read_text(path):
    try:
        with open(path, "r") as f:
            return f.read()
    except OSError as exc:
        raise FEMIOError(f"error opening file '{path}': {exc.strerror}") from exc


# ---------------------------------------------------------------------------
# Native format
# ---------------------------------------------------------------------------

class _TokenStream:
    """Sequential reader over whitespace-separated tokens."""

    def __init__(self, text, fmt):
        self.tokens = text.split()
        self.pos = 0
        self.fmt = fmt

    def at_end(self):
        return self.pos >= len(self.tokens)

    def next(self):
        if self.at_end():
            raise MeshFormatError(f"wrong {self.fmt}-file format: unexpected end of file")
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def integer(self):
        tok = self.next()
        try:
            return int(tok)
        except ValueError:
            raise MeshFormatError(
                f"wrong {self.fmt}-file format: integer expected, got '{tok}'") from None

    def floats(self, count):
        if self.pos + count > len(self.tokens):
            raise MeshFormatError(f"wrong {self.fmt}-file format: unexpected end of file")
        chunk = self.tokens[self.pos:self.pos + count]
        self.pos += count
        try:
            return np.array(chunk, dtype=np.float64)
        except ValueError:
            raise MeshFormatError(
                f"wrong {self.fmt}-file format: bad number in {chunk}") from None

    def integers(self, count):
        if self.pos + count > len(self.tokens):
            raise MeshFormatError(f"wrong {self.fmt}-file format: unexpected end of file")
        chunk = self.tokens[self.pos:self.pos + count]
        self.pos += count
        try:
            return np.array(chunk, dtype=np.int64)
        except ValueError:
            raise MeshFormatError(
                f"wrong {self.fmt}-file format: bad index in {chunk}") from None


def read_native(path):
    """
    Read a native ``.mesh`` file.

    For shell types a trailing boundary section, if present, is read and
    discarded: boundary elements of shells are the elements themselves.

    Returns
    -------
    mesh : Mesh
        Without mesh map; ``load_mesh`` builds it.
    """
    stream = _TokenStream(_read_text(path), "MESH")
    try:
        fe_type = FeType.from_tag(stream.next())
    except ConfigError as exc:
        raise MeshFormatError(f"wrong MESH-file format: {exc}") from None
    info = FE_INFO[fe_type]

    n = stream.integer()
    nodes = stream.floats(n * info.dim).reshape(n, info.dim)
    m = stream.integer()
    elements = stream.integers(m * info.fe_size).reshape(m, info.fe_size)

    boundary = None
    if fe_type not in SHELL_TYPES:
        k = stream.integer()
        boundary = stream.integers(k * info.be_size).reshape(k, info.be_size)
    elif not stream.at_end():
        k = stream.integer()
        stream.integers(k * info.be_size)

    return Mesh(fe_type, nodes, elements, boundary)


def save_mesh(mesh, path):
    """
    Write a mesh in the native format.

    Coordinates are written with ``%f``; shells omit the boundary section.

    Raises
    ------
    FEMIOError
        If the file cannot be created.
    """
    lines = [mesh.fe_name, str(mesh.n_nodes)]
    lines += [" ".join(f"{v:f}" for v in row) for row in mesh.nodes]
    lines.append(str(mesh.n_elements))
    lines += [" ".join(str(i) for i in row) for row in mesh.elements]
    if not mesh.is_shell:
        lines.append(str(mesh.n_boundary))
        lines += [" ".join(str(i) for i in row) for row in mesh.boundary_elements]
    try:
        with open(path, "w") as f:
            f.write("\n".join(lines) + "\n")
    except OSError as exc:
        raise FEMIOError(f"error writing MESH-file '{path}': {exc.strerror}") from exc


# ---------------------------------------------------------------------------
# Netgen .vol and Gmsh .msh (through meshio)
# ---------------------------------------------------------------------------

# meshio cell types read without becoming elements
_IGNORED_CELLS = ("vertex", "line")


def _meshio_read(path, file_format, fmt):
    """meshio.read with its failures mapped onto FEMIOError / MeshFormatError."""
    if not os.path.isfile(path):
        raise FEMIOError(f"error opening file '{path}': No such file or directory")
    try:
        return meshio.read(path, file_format=file_format)
    except OSError as exc:
        raise FEMIOError(f"error opening file '{path}': {exc.strerror}") from exc
    except (meshio.ReadError, ValueError, IndexError, KeyError, EOFError) as exc:
        raise MeshFormatError(f"wrong {fmt}-file format: {exc}") from None


def _cells(msh, fmt, supported):
    """Connectivity arrays by meshio cell type, rejecting unsupported types."""
    cells = msh.cells_dict
    unsupported = sorted(set(cells) - set(supported))
    if unsupported:
        raise MeshFormatError(
            f"this format of {fmt}-file is not supported (cell types {unsupported})")
    return cells


def read_vol(path):
    """
    Read a Netgen ``.vol`` mesh as Tet4.

    Volume elements (tetrahedra) are the elements and surface elements
    (triangles) the boundary faces. Edge segments and point elements
    are ignored.
    """
    msh = _meshio_read(path, "netgen", "VOL")
    cells = _cells(msh, "VOL", _IGNORED_CELLS + ("triangle", "tetra"))
    if "tetra" not in cells:
        raise MeshFormatError("wrong VOL-file format: no volumeelements")
    nodes = np.asarray(msh.points, dtype=np.float64)
    if nodes.ndim != 2 or nodes.shape[1] != 3:
        raise MeshFormatError("wrong VOL-file format: three coordinates expected")
    return Mesh(FeType.TET4, nodes, cells["tetra"], cells.get("triangle", []))


def read_msh(path):
    """
    Read a Gmsh mesh (any version meshio reads, 4.x ASCII in practice).

    Supported cells are lines, triangles and tetrahedra; point entities are
    ignored, and so are line cells of 3D meshes.

    Raises
    ------
    MeshFormatError
        On a malformed file or an unsupported cell type.
    """
    msh = _meshio_read(path, "gmsh", "MSH")
    nodes = np.asarray(msh.points, dtype=np.float64)
    planar = nodes.shape[1] < 3 or bool(np.all(np.abs(nodes[:, 2]) <= MSH_PLANAR_EPS))

    if planar:
        cells = _cells(msh, "MSH", _IGNORED_CELLS + ("triangle",))
        return Mesh(FeType.TRI3, nodes[:, :2], cells.get("triangle", []),
                    cells.get("line", []))

    cells = _cells(msh, "MSH", _IGNORED_CELLS + ("triangle", "tetra"))
    faces = cells.get("triangle", [])
    if "tetra" in cells:
        return Mesh(FeType.TET4, nodes, cells["tetra"], faces)
    return Mesh(FeType.SHELL_TRI3, nodes, faces)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

READERS = {
    ".mesh": read_native,
    ".vol": read_vol,
    ".msh": read_msh,
}


def load_mesh(path):
    """
    Load a mesh, choosing the reader from the file extension.

    Builds the mesh map and logs a short description.

    Raises
    ------
    MeshFormatError
        For an unknown extension or a malformed file.
    FEMIOError
        If the file cannot be opened.
    """
    ext = os.path.splitext(path)[1].lower()
    try:
        reader = READERS[ext]
    except KeyError:
        raise MeshFormatError(f"wrong mesh-file format: '{ext or path}'") from None

    mesh = reader(path)
    mesh.create_mesh_map()

    degenerate = mesh.degenerate_elements()
    if len(degenerate):
        log.warning("%s: %d degenerate element(s), first is %d",
                    path, len(degenerate), degenerate[0])
    log.info("Mesh file: %s", path)
    log.info("Finite element type: %s", mesh.fe_name)
    log.info("Number of nodes: %d", mesh.n_nodes)
    log.info("Number of finite elements: %d", mesh.n_elements)
    return mesh
