"""
Linearization of tensor indices.

Every place that turns a DOF index pair into a single integer (local
element numbering, facet numbering, global numbering) goes through
MultiIndexLayout, so all of them agree on one bijection:

    (i_0, ..., i_{d-1}) -> sum_k i_k * stride_k,   stride_{d-1} = 1

i.e. row-major, last index fastest. For 2D DOFs (ix, iy) on extents
(nx, ny) this is ix * ny + iy, matching the order of
itertools.product(range(nx), range(ny)).
"""

from typing import Tuple


class MultiIndexLayout:
    """Row-major bijection between {0..n_0-1} x ... and {0..prod(n)-1}."""

    __slots__ = ("extents", "_strides", "size")

    def __init__(self, extents: Tuple[int, ...]):
        extents = tuple(int(n) for n in extents)
        if any(n < 0 for n in extents):
            raise ValueError(f"Negative extent in {extents}")
        self.extents = extents

        strides = []
        stride = 1
        for n in reversed(extents):
            strides.append(stride)
            stride *= n
        self._strides = tuple(reversed(strides))
        self.size = stride

    def linear_index(self, *index: int) -> int:
        if len(index) != len(self.extents):
            raise ValueError(f"Expected {len(self.extents)} indices, got {len(index)}")
        linear = 0
        for i, n, stride in zip(index, self.extents, self._strides):
            if not 0 <= i < n:
                raise IndexError(f"Index {index} out of bounds for extents {self.extents}")
            linear += i * stride
        return linear

    def multi_index(self, linear: int) -> Tuple[int, ...]:
        if not 0 <= linear < self.size:
            raise IndexError(f"Linear index {linear} out of bounds for size {self.size}")
        index = []
        for stride in self._strides:
            i, linear = divmod(linear, stride)
            index.append(i)
        return tuple(index)

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return f"MultiIndexLayout({self.extents})"
