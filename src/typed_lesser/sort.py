"""In-place sorting of index-addressable collections with a less function.

The collection only needs ``len()`` and a way to exchange two elements: a
``swap(i, j)`` method (as on TypedSlice) or item assignment (as on list).
``less(i, j)`` must report whether element i sorts strictly before element j.
"""

from __future__ import annotations

from collections.abc import MutableSequence
from typing import Any, Callable

from typed_lesser.errors import InvalidArgument

Less = Callable[[int, int], bool]
Swap = Callable[[int, int], None]

# Ranges this short are finished with insertion sort
INSERTION_SORT_THRESHOLD = 12

# Initial run length for the stable sort
STABLE_BLOCK_SIZE = 20


def sort_slice(collection: Any, less: Less) -> None:
    """Sort the collection in place. The sort is not guaranteed to be stable."""
    swap = _swapper(collection)
    n = len(collection)
    if n < 2:
        return
    _quick_sort(less, swap, 0, n, 2 * n.bit_length())


def sort_slice_stable(collection: Any, less: Less) -> None:
    """Sort the collection in place, keeping equal elements in their original order."""
    swap = _swapper(collection)
    n = len(collection)
    if n < 2:
        return

    block_size = STABLE_BLOCK_SIZE
    a, b = 0, block_size
    while b <= n:
        _insertion_sort(less, swap, a, b)
        a = b
        b += block_size
    _insertion_sort(less, swap, a, n)

    while block_size < n:
        a, b = 0, 2 * block_size
        while b <= n:
            _sym_merge(less, swap, a, a + block_size, b)
            a = b
            b += 2 * block_size
        m = a + block_size
        if m < n:
            _sym_merge(less, swap, a, m, n)
        block_size *= 2


def slice_is_sorted(collection: Any, less: Less) -> bool:
    """Return whether the collection is sorted according to less."""
    for i in range(len(collection) - 1, 0, -1):
        if less(i, i - 1):
            return False
    return True


def _swapper(collection: Any) -> Swap:
    swap = getattr(collection, "swap", None)
    if callable(swap):
        return swap
    if isinstance(collection, MutableSequence):

        def swap_items(i: int, j: int) -> None:
            collection[i], collection[j] = collection[j], collection[i]

        return swap_items
    raise InvalidArgument(f"cannot swap elements of {type(collection).__name__}")


def _insertion_sort(less: Less, swap: Swap, a: int, b: int) -> None:
    for i in range(a + 1, b):
        j = i
        while j > a and less(j, j - 1):
            swap(j, j - 1)
            j -= 1


def _sift_down(less: Less, swap: Swap, lo: int, hi: int, first: int) -> None:
    """Restore the heap property below root lo within data[first:first + hi]."""
    root = lo
    while True:
        child = 2 * root + 1
        if child >= hi:
            return
        if child + 1 < hi and less(first + child, first + child + 1):
            child += 1
        if not less(first + root, first + child):
            return
        swap(first + root, first + child)
        root = child


def _heap_sort(less: Less, swap: Swap, a: int, b: int) -> None:
    first, hi = a, b - a
    for i in range((hi - 1) // 2, -1, -1):
        _sift_down(less, swap, i, hi, first)
    for i in range(hi - 1, -1, -1):
        swap(first, first + i)
        _sift_down(less, swap, 0, i, first)


def _median_of_three(less: Less, swap: Swap, m1: int, m0: int, m2: int) -> None:
    """Order the three elements so that data[m0] <= data[m1] <= data[m2]."""
    if less(m1, m0):
        swap(m1, m0)
    if less(m2, m1):
        swap(m2, m1)
        if less(m1, m0):
            swap(m1, m0)


def _partition(less: Less, swap: Swap, a: int, b: int) -> int:
    """Partition data[a:b] around a median-of-three pivot and return its final index.

    Both scans stop on elements equal to the pivot, so runs of equal keys
    split evenly instead of degrading to quadratic time.
    """
    lo, hi = a, b - 1
    _median_of_three(less, swap, lo, lo + (hi - lo) // 2, hi)
    i, j = lo, hi + 1
    while True:
        i += 1
        while less(i, lo):
            if i == hi:
                break
            i += 1
        j -= 1
        while less(lo, j):
            j -= 1
        if i >= j:
            break
        swap(i, j)
    swap(lo, j)
    return j


def _quick_sort(less: Less, swap: Swap, a: int, b: int, max_depth: int) -> None:
    while b - a > INSERTION_SORT_THRESHOLD:
        if max_depth == 0:
            _heap_sort(less, swap, a, b)
            return
        max_depth -= 1
        p = _partition(less, swap, a, b)
        # Recurse into the smaller side, loop on the larger one
        if p - a < b - p - 1:
            _quick_sort(less, swap, a, p, max_depth)
            a = p + 1
        else:
            _quick_sort(less, swap, p + 1, b, max_depth)
            b = p
    if b - a > 1:
        _insertion_sort(less, swap, a, b)


def _sym_merge(less: Less, swap: Swap, a: int, m: int, b: int) -> None:
    """Merge the sorted runs data[a:m] and data[m:b] in place (SymMerge).

    See Pok-Son Kim and Arne Kutzner, "Stable Minimum Storage Merging by
    Symmetric Comparisons", ESA 2004.
    """
    if m - a == 1:
        # Binary search for the insertion point of data[a] in data[m:b],
        # then shift it there.
        i, j = m, b
        while i < j:
            h = (i + j) // 2
            if less(h, a):
                i = h + 1
            else:
                j = h
        for k in range(a, i - 1):
            swap(k, k + 1)
        return
    if b - m == 1:
        i, j = a, m
        while i < j:
            h = (i + j) // 2
            if not less(m, h):
                i = h + 1
            else:
                j = h
        for k in range(m, i, -1):
            swap(k, k - 1)
        return

    mid = (a + b) // 2
    n = mid + m
    if m > mid:
        start, r = n - b, mid
    else:
        start, r = a, m
    p = n - 1
    while start < r:
        c = (start + r) // 2
        if not less(p - c, c):
            start = c + 1
        else:
            r = c

    end = n - start
    if start < m < end:
        _rotate(swap, start, m, end)
    if a < start < mid:
        _sym_merge(less, swap, a, start, mid)
    if mid < end < b:
        _sym_merge(less, swap, mid, end, b)


def _swap_range(swap: Swap, a: int, b: int, n: int) -> None:
    for i in range(n):
        swap(a + i, b + i)


def _rotate(swap: Swap, a: int, m: int, b: int) -> None:
    """Rotate data[a:b] so that data[m:b] comes before data[a:m]."""
    i, j = m - a, b - m
    while i != j:
        if i > j:
            _swap_range(swap, m - i, m, j)
            i -= j
        else:
            _swap_range(swap, m - i, m + j - i, i)
            j -= i
    _swap_range(swap, m - i, m, i)
