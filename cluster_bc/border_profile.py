"""
BorderProfile - shortest path lengths and counts from a vertex to the border
vertices of its cluster.

Two vertices of the same cluster whose normalized profiles compare equal reach
every border vertex through the same number of shortest paths at the same
relative distance, so they contribute identically to centrality sums that go
through the cluster boundary. ``equivalence_classes`` groups vertices on
exactly that test.
"""
import operator
from functools import cmp_to_key

import numpy as np


def _check_length_dtype(dtype):
    dtype = np.dtype(dtype)
    if not (np.issubdtype(dtype, np.signedinteger) or np.issubdtype(dtype, np.floating)):
        raise ValueError(f"Length dtype must be signed integer or floating, got {dtype}")
    return dtype


def _check_count_dtype(dtype):
    dtype = np.dtype(dtype)
    if not (np.issubdtype(dtype, np.integer) or np.issubdtype(dtype, np.floating)):
        raise ValueError(f"Count dtype must be integer or floating, got {dtype}")
    return dtype


def _divide_inplace(values, divisor):
    if np.issubdtype(values.dtype, np.integer):
        divisor = np.asarray(divisor)
        if np.any(divisor == 0):
            raise ZeroDivisionError("integer division by zero in border profile")
        if np.issubdtype(divisor.dtype, np.integer):
            # truncate toward zero: remove the C-style remainder first
            quotient = (values - np.fmod(values, divisor)) // divisor
        else:
            quotient = np.trunc(values / divisor)
        np.copyto(values, quotient, casting='unsafe')
    else:
        with np.errstate(divide='ignore', invalid='ignore'):
            np.divide(values, divisor, out=values, casting='unsafe')


class BorderProfile:
    """
    Fixed-width (length, count) vectors over the border vertices of a cluster.

    Index ``i`` refers to the i-th border vertex of the cluster; which vertex
    that is belongs to the caller. Arithmetic results keep the dtypes of the
    left operand, comparisons order by counts first and lengths second.

    Parameters:
    -----------
    border_count : int
        Number of border vertices.
    count_dtype : numpy dtype, default=np.int64
        Representation of shortest path counts.
    length_dtype : numpy dtype, default=np.float64
        Representation of shortest path lengths; must be signed.
    """

    __hash__ = None
    # keep numpy scalars from broadcasting over profiles
    __array_ufunc__ = None

    def __init__(self, border_count, count_dtype=np.int64, length_dtype=np.float64):
        border_count = operator.index(border_count)
        if border_count < 0:
            raise ValueError(f"border_count must be non-negative, got {border_count}")
        self._lengths = np.zeros(border_count, dtype=_check_length_dtype(length_dtype))
        self._counts = np.zeros(border_count, dtype=_check_count_dtype(count_dtype))

    @classmethod
    def from_profile(cls, source, count_dtype=None, length_dtype=None):
        """Copy ``source`` converting elements to the requested dtypes."""
        profile = cls(source.borders,
                      count_dtype=source.count_dtype if count_dtype is None else count_dtype,
                      length_dtype=source.length_dtype if length_dtype is None else length_dtype)
        np.copyto(profile._lengths, source._lengths, casting='unsafe')
        np.copyto(profile._counts, source._counts, casting='unsafe')
        return profile

    @classmethod
    def from_arrays(cls, lengths, counts, count_dtype=np.int64, length_dtype=np.float64):
        """Build a profile from per-border lengths and counts of equal size."""
        lengths = np.asarray(lengths).ravel()
        counts = np.asarray(counts).ravel()
        if lengths.shape != counts.shape:
            raise ValueError(f"lengths and counts differ in size: {lengths.size} != {counts.size}")
        profile = cls(lengths.size, count_dtype=count_dtype, length_dtype=length_dtype)
        np.copyto(profile._lengths, lengths, casting='unsafe')
        np.copyto(profile._counts, counts, casting='unsafe')
        return profile

    def copy(self):
        return BorderProfile.from_profile(self)

    def astype(self, count_dtype, length_dtype):
        return BorderProfile.from_profile(self, count_dtype, length_dtype)

    def assign(self, source):
        """Take over the values of ``source`` in this profile's dtypes, resizing if needed."""
        if source.borders != self.borders:
            self._lengths = np.zeros(source.borders, dtype=self._lengths.dtype)
            self._counts = np.zeros(source.borders, dtype=self._counts.dtype)
        np.copyto(self._lengths, source._lengths, casting='unsafe')
        np.copyto(self._counts, source._counts, casting='unsafe')
        return self

    @property
    def borders(self):
        return int(self._lengths.size)

    @property
    def count_dtype(self):
        return self._counts.dtype

    @property
    def length_dtype(self):
        return self._lengths.dtype

    @property
    def lengths(self):
        """Read-only view of the border shortest path lengths."""
        view = self._lengths.view()
        view.flags.writeable = False
        return view

    @property
    def counts(self):
        """Read-only view of the border shortest path counts."""
        view = self._counts.view()
        view.flags.writeable = False
        return view

    def __len__(self):
        return self.borders

    def _check_index(self, index):
        index = operator.index(index)
        if not 0 <= index < self.borders:
            raise IndexError(f"Border index {index} out of range [0, {self.borders})")
        return index

    def set_length(self, index, length):
        self._lengths[self._check_index(index)] = length

    def get_length(self, index):
        return self._lengths[self._check_index(index)]

    def set_count(self, index, count):
        self._counts[self._check_index(index)] = count

    def get_count(self, index):
        return self._counts[self._check_index(index)]

    def min_length(self):
        """Smallest border length, 0 when the cluster has no border."""
        if self.borders == 0:
            return self.length_dtype.type(0)
        return self._lengths.min()

    def normalize(self):
        """Shift lengths so the closest border is at distance 0."""
        shift = self.min_length()
        # a vertex that reaches no border keeps its all-inf lengths
        if np.isfinite(shift):
            self._lengths -= shift
        return self

    def reset(self):
        self._lengths.fill(0)
        self._counts.fill(0)
        return self

    def _check_width(self, other):
        if other.borders != self.borders:
            raise ValueError(f"Border profile width mismatch: {self.borders} != {other.borders}")

    def squared_distance(self, other):
        """Squared euclidean distance over lengths and counts, in the length dtype."""
        self._check_width(other)
        W = self.length_dtype
        theirs = other._lengths.astype(W)
        # matching unreachable (inf) borders contribute nothing
        with np.errstate(invalid="ignore"):
            dl = np.where(self._lengths == theirs, W.type(0), self._lengths - theirs)
        dc = self._counts.astype(W) - other._counts.astype(W)
        return np.sum(dl * dl + dc * dc, dtype=W)

    # Elementwise arithmetic

    def _operands(self, other):
        if isinstance(other, BorderProfile):
            self._check_width(other)
            return other._lengths, other._counts
        if isinstance(other, (int, float, np.integer, np.floating)):
            return other, other
        return None

    def _apply(self, other, ufunc):
        operands = self._operands(other)
        if operands is None:
            return NotImplemented
        ufunc(self._lengths, operands[0], out=self._lengths, casting='unsafe')
        ufunc(self._counts, operands[1], out=self._counts, casting='unsafe')
        return self

    def _divide(self, other):
        operands = self._operands(other)
        if operands is None:
            return NotImplemented
        # check both halves before touching either
        for values, divisor in ((self._lengths, operands[0]), (self._counts, operands[1])):
            if np.issubdtype(values.dtype, np.integer) and np.any(np.asarray(divisor) == 0):
                raise ZeroDivisionError("integer division by zero in border profile")
        _divide_inplace(self._lengths, operands[0])
        _divide_inplace(self._counts, operands[1])
        return self

    def __iadd__(self, other):
        return self._apply(other, np.add)

    def __isub__(self, other):
        return self._apply(other, np.subtract)

    def __imul__(self, other):
        return self._apply(other, np.multiply)

    def __itruediv__(self, other):
        return self._divide(other)

    def __add__(self, other):
        return self.copy().__iadd__(other)

    def __sub__(self, other):
        return self.copy().__isub__(other)

    def __mul__(self, other):
        return self.copy().__imul__(other)

    def __truediv__(self, other):
        return self.copy().__itruediv__(other)

    __radd__ = __add__
    __rmul__ = __mul__

    add = __add__
    subtract = __sub__
    multiply = __mul__
    divide = __truediv__

    # Ordering

    def compare(self, other):
        """
        Signed difference at the first differing border count, else at the
        first differing border length, else 0. Returned in the length dtype.
        """
        self._check_width(other)
        W = self.length_dtype
        for mine, theirs in ((self._counts, other._counts), (self._lengths, other._lengths)):
            mine = mine.astype(W)
            theirs = theirs.astype(W)
            # locate by inequality: unreachable borders are inf and inf - inf is nan
            differing = np.flatnonzero(mine != theirs)
            if differing.size:
                first = differing[0]
                return mine[first] - theirs[first]
        return W.type(0)

    def __eq__(self, other):
        if not isinstance(other, BorderProfile):
            return NotImplemented
        return bool(self.compare(other) == 0)

    def __ne__(self, other):
        if not isinstance(other, BorderProfile):
            return NotImplemented
        return bool(self.compare(other) != 0)

    def __lt__(self, other):
        if not isinstance(other, BorderProfile):
            return NotImplemented
        return bool(self.compare(other) < 0)

    def __gt__(self, other):
        if not isinstance(other, BorderProfile):
            return NotImplemented
        return bool(self.compare(other) > 0)

    def __le__(self, other):
        if not isinstance(other, BorderProfile):
            return NotImplemented
        return bool(self.compare(other) <= 0)

    def __ge__(self, other):
        if not isinstance(other, BorderProfile):
            return NotImplemented
        return bool(self.compare(other) >= 0)

    def __repr__(self):
        return (f"BorderProfile(borders={self.borders}, lengths={self._lengths.tolist()}, "
                f"counts={self._counts.tolist()})")


def _profile_order(a, b):
    diff = a[1].compare(b[1])
    return int(diff > 0) - int(diff < 0)


def equivalence_classes(profiles):
    """
    Group vertices whose profiles compare equal.

    Parameters:
    -----------
    profiles : dict
        Vertex id -> BorderProfile, all of the same width. Profiles are compared
        as given; normalize them first to compare modulo a constant offset.

    Returns:
    --------
    list of lists
        Vertex ids of each class in ascending order, classes sorted by profile.
    """
    items = sorted(profiles.items(), key=operator.itemgetter(0))
    items.sort(key=cmp_to_key(_profile_order))

    classes = []
    previous = None
    for vertex, profile in items:
        if previous is not None and profile == previous:
            classes[-1].append(vertex)
        else:
            classes.append([vertex])
        previous = profile
    return classes
