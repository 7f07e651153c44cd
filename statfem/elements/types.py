"""
Element type tags and their per-type constants.

| Type       | tag    | beSize | feSize | dim | dof |
|------------|--------|--------|--------|-----|-----|
| Bar2       | fe1d2  | 1      | 2      | 1   | 1   |
| Tri3       | fe2d3  | 2      | 3      | 2   | 2   |
| Quad4      | fe2d4  | 2      | 4      | 2   | 2   |
| Tet4       | fe3d4  | 3      | 4      | 3   | 3   |
| Hex8       | fe3d8  | 4      | 8      | 3   | 3   |
| ShellTri3  | fe3d3s | 3      | 3      | 3   | 6   |
| ShellQuad4 | fe3d4s | 4      | 4      | 3   | 6   |
"""

from dataclasses import dataclass
from enum import Enum

from ..errors import ConfigError


class FeType(Enum):
    BAR2 = "fe1d2"
    TRI3 = "fe2d3"
    QUAD4 = "fe2d4"
    TET4 = "fe3d4"
    HEX8 = "fe3d8"
    SHELL_TRI3 = "fe3d3s"
    SHELL_QUAD4 = "fe3d4s"

    @classmethod
    def from_tag(cls, tag):
        """Look up a type by its native tag (``fe2d3`` ...)."""
        try:
            return cls(tag)
        except ValueError:
            raise ConfigError(f"unknown FE type '{tag}'") from None

    @property
    def info(self):
        return FE_INFO[self]


@dataclass(frozen=True)
class FeInfo:
    be_size: int
    fe_size: int
    dim: int
    dof: int
    label: str


FE_INFO = {
    FeType.BAR2: FeInfo(1, 2, 1, 1, "Bar2"),
    FeType.TRI3: FeInfo(2, 3, 2, 2, "Tri3"),
    FeType.QUAD4: FeInfo(2, 4, 2, 2, "Quad4"),
    FeType.TET4: FeInfo(3, 4, 3, 3, "Tet4"),
    FeType.HEX8: FeInfo(4, 8, 3, 3, "Hex8"),
    FeType.SHELL_TRI3: FeInfo(3, 3, 3, 6, "ShellTri3"),
    FeType.SHELL_QUAD4: FeInfo(4, 4, 3, 6, "ShellQuad4"),
}

SHELL_TYPES = (FeType.SHELL_TRI3, FeType.SHELL_QUAD4)
SOLID_TYPES = (FeType.TET4, FeType.HEX8)
PLANE_TYPES = (FeType.TRI3, FeType.QUAD4)
