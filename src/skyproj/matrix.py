"""
skyproj.matrix — 3×3 and 3×1 Matrix Values
===========================================

Small immutable linear-algebra values used to chain the sky rotations.
Each value wraps a read-only NumPy array, so a matrix handed out by a
:class:`~skyproj.rotation.Rotation` cannot be changed through an alias.

Conventions
-----------
- Constructor arguments are given row by row::

      Matrix3x3(a, b, c,
                d, e, f,
                g, h, i)

- ``A.premult(B)`` is ``B × A``; ``A.postmult(B)`` is ``A × B``;
  ``A @ B`` is ``A × B``.
- :meth:`Matrix3x3.invert` is the general cofactor inverse, not a
  transpose, even though every matrix built by this package is a rotation.
"""

import numpy as np
from numpy.typing import NDArray


def _frozen(a: NDArray) -> NDArray:
    a = np.array(a, dtype=np.float64)
    a.flags.writeable = False
    return a


# ════════════════════════════════════════════════════════════════════════════
#  Matrix3x1
# ════════════════════════════════════════════════════════════════════════════

class Matrix3x1:
    """Immutable column vector of three doubles."""

    __slots__ = ("_num",)

    def __init__(self, a: float = 0.0, b: float = 0.0, c: float = 0.0):
        self._num = _frozen((a, b, c))

    @classmethod
    def from_array(cls, v: NDArray) -> "Matrix3x1":
        v = np.asarray(v, dtype=np.float64)
        if v.shape != (3,):
            raise ValueError(f"Expected (3,) array, got shape {v.shape}")
        return cls(v[0], v[1], v[2])

    @property
    def x(self) -> float:
        return float(self._num[0])

    @property
    def y(self) -> float:
        return float(self._num[1])

    @property
    def z(self) -> float:
        return float(self._num[2])

    def __getitem__(self, i: int) -> float:
        return float(self._num[i])

    def __iter__(self):
        return iter(float(n) for n in self._num)

    def __len__(self) -> int:
        return 3

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix3x1):
            return NotImplemented
        return bool(np.array_equal(self._num, other._num))

    def __hash__(self) -> int:
        return hash(tuple(self._num.tolist()))

    def __repr__(self) -> str:
        return f"Matrix3x1({self.x!r}, {self.y!r}, {self.z!r})"

    def as_array(self) -> NDArray:
        """Writable (3,) copy."""
        return self._num.copy()

    def norm(self) -> float:
        return float(np.linalg.norm(self._num))

    def clone(self) -> "Matrix3x1":
        return Matrix3x1(*self._num)


# ════════════════════════════════════════════════════════════════════════════
#  Matrix3x3
# ════════════════════════════════════════════════════════════════════════════

class Matrix3x3:
    """Immutable 3×3 matrix.

    ``Matrix3x3()`` is the identity; ``Matrix3x3(a, …, i)`` takes nine
    values row by row.
    """

    __slots__ = ("_num",)

    def __init__(self, *values: float):
        if len(values) == 0:
            self._num = _frozen(np.eye(3))
        elif len(values) == 9:
            self._num = _frozen(np.reshape(values, (3, 3)))
        else:
            raise ValueError(f"Matrix3x3 takes 0 or 9 values, got {len(values)}")

    # ── Construction ──

    @classmethod
    def identity(cls) -> "Matrix3x3":
        return cls()

    @classmethod
    def from_array(cls, a: NDArray) -> "Matrix3x3":
        """Build from any (3,3) array-like."""
        a = np.asarray(a, dtype=np.float64)
        if a.shape != (3, 3):
            raise ValueError(f"Expected (3,3) array, got shape {a.shape}")
        m = cls.__new__(cls)
        m._num = _frozen(a)
        return m

    def set(self, a: float, b: float, c: float,
            d: float, e: float, f: float,
            g: float, h: float, i: float) -> "Matrix3x3":
        """Return a matrix holding the given row values.

        Matrices are values; ``set`` never modifies ``self``.
        """
        return Matrix3x3(a, b, c, d, e, f, g, h, i)

    def clone(self) -> "Matrix3x3":
        return Matrix3x3.from_array(self._num)

    # ── Access ──

    def __getitem__(self, ij) -> float:
        return float(self._num[ij])

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix3x3):
            return NotImplemented
        return bool(np.array_equal(self._num, other._num))

    def __hash__(self) -> int:
        return hash(tuple(self._num.ravel().tolist()))

    def __repr__(self) -> str:
        rows = ", ".join(repr(r) for r in self._num.tolist())
        return f"Matrix3x3({rows})"

    def as_array(self) -> NDArray:
        """Writable (3,3) copy."""
        return self._num.copy()

    @property
    def array(self) -> NDArray:
        """Read-only (3,3) view of the values."""
        return self._num

    def allclose(self, other: "Matrix3x3", atol: float = 1e-12) -> bool:
        return bool(np.allclose(self._num, other._num, rtol=0.0, atol=atol))

    # ── Products ──

    @staticmethod
    def multiply(m: "Matrix3x3", n: "Matrix3x3") -> "Matrix3x3":
        """m × n"""
        return Matrix3x3.from_array(m._num @ n._num)

    def premult(self, m: "Matrix3x3") -> "Matrix3x3":
        """m × self"""
        return Matrix3x3.multiply(m, self)

    def postmult(self, n: "Matrix3x3") -> "Matrix3x3":
        """self × n"""
        return Matrix3x3.multiply(self, n)

    def mult(self, v):
        """Apply to a vector.

        Parameters
        ----------
        v : Matrix3x1, (3,) array or (N,3) array

        Returns
        -------
        Matrix3x1 for a Matrix3x1 argument, otherwise an array of the
        input's shape.
        """
        if isinstance(v, Matrix3x1):
            return Matrix3x1(*(self._num @ v._num))
        v = np.asarray(v, dtype=np.float64)
        if v.ndim == 1 and v.shape == (3,):
            return self._num @ v
        if v.ndim == 2 and v.shape[1] == 3:
            return v @ self._num.T
        raise ValueError(f"Expected (3,) or (N,3) array, got shape {v.shape}")

    def __matmul__(self, other):
        if isinstance(other, Matrix3x3):
            return self.postmult(other)
        return self.mult(other)

    # ── Inverse & properties ──

    def determinant(self) -> float:
        n = self._num
        return float(n[0, 0] * n[1, 1] * n[2, 2] + n[0, 1] * n[1, 2] * n[2, 0]
                     + n[0, 2] * n[1, 0] * n[2, 1] - n[0, 2] * n[1, 1] * n[2, 0]
                     - n[0, 0] * n[1, 2] * n[2, 1] - n[0, 1] * n[1, 0] * n[2, 2])

    def invert(self) -> "Matrix3x3":
        """General 3×3 inverse by cofactors.

        A singular matrix yields inf/NaN entries; callers only hand in
        rotations.
        """
        n = self._num
        det = self.determinant()
        d = np.empty((3, 3))
        with np.errstate(divide="ignore", invalid="ignore"):
            for i in range(3):
                m, k = (i + 1) % 3, (i + 2) % 3
                for j in range(3):
                    p, q = (j + 1) % 3, (j + 2) % 3
                    d[j, i] = (n[m, p] * n[k, q] - n[m, q] * n[k, p]) / np.float64(det)
        return Matrix3x3.from_array(d)

    def transpose(self) -> "Matrix3x3":
        return Matrix3x3.from_array(self._num.T)

    @property
    def T(self) -> "Matrix3x3":
        return self.transpose()

    def is_orthonormal(self, atol: float = 1e-9) -> bool:
        """R·Rᵀ = I and det(R) = +1 within ``atol``."""
        return bool(np.allclose(self._num @ self._num.T, np.eye(3), rtol=0.0, atol=atol)
                    and abs(self.determinant() - 1.0) <= atol)


# Half turn about z
Z180 = Matrix3x3(-1.0, 0.0, 0.0,
                 0.0, -1.0, 0.0,
                 0.0, 0.0, 1.0)
