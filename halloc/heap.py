"""A boundary-tag heap allocator over a fixed byte arena.

Every block carries a 16-byte header and a 16-byte footer holding the
block's payload size with the free flag packed into bit 0.  Free blocks are
kept on an explicit doubly linked LIFO free list stored inside their own
payloads, allocation is first fit, large blocks are split and freed
neighbours are coalesced.  Addresses handed out are byte offsets into the
arena and are always 16-byte aligned.
"""

from __future__ import annotations

import struct
import sys
from dataclasses import dataclass
from typing import Iterator, TextIO

MIN_ALLOC = 16
ALIGNMENT = 16
HEAP_SIZE = 16 * 1024 * 1024

_TAG = struct.Struct("<QQ")
_NODE = struct.Struct("<qq")
HEADER_SIZE = _TAG.size
FOOTER_SIZE = _TAG.size
BLOCK_OVERHEAD = HEADER_SIZE + FOOTER_SIZE
_FREE_BIT = 1
_SIZE_MASK = ~_FREE_BIT
_NIL = -1


def _align(size: int) -> int:
    """Round *size* up to the next multiple of the alignment."""
    return (size + ALIGNMENT - 1) & ~(ALIGNMENT - 1)


class HeapExhaustedError(MemoryError):
    """Raised when no free block is large enough for a request."""


@dataclass(frozen=True)
class BlockInfo:
    """One block of the heap: its user address, payload size and state."""

    address: int
    size: int
    free: bool


class Heap:
    """A fixed-size heap with boundary tags, splitting and coalescing."""

    def __init__(self, size: int = HEAP_SIZE) -> None:
        usable = (size - 3 * BLOCK_OVERHEAD) & ~(ALIGNMENT - 1)
        if usable < MIN_ALLOC:
            raise ValueError(f"heap size {size} is too small")
        self.size = size
        self.reset()

    # ------------------------------------------------------------------
    # layout helpers

    def _tag(self, offset: int) -> tuple[int, bool]:
        word, _ = _TAG.unpack_from(self._data, offset)
        return word & _SIZE_MASK, bool(word & _FREE_BIT)

    def _write_tag(self, offset: int, size: int, free: bool) -> None:
        _TAG.pack_into(self._data, offset, size | (_FREE_BIT if free else 0), 0)

    def _set_tags(self, header: int, size: int, free: bool) -> None:
        self._write_tag(header, size, free)
        self._write_tag(header + HEADER_SIZE + size, size, free)

    def _next(self, header: int) -> int:
        return header + BLOCK_OVERHEAD + self._tag(header)[0]

    def _prev(self, header: int) -> int:
        prev_size, _ = self._tag(header - FOOTER_SIZE)
        return header - BLOCK_OVERHEAD - prev_size

    def _header_of(self, ptr: int) -> int:
        """Validate a user pointer to an allocated block; return its header."""
        if not isinstance(ptr, int) or ptr % ALIGNMENT:
            raise ValueError(f"invalid pointer {ptr!r}")
        header = ptr - HEADER_SIZE
        if header < self._first or header >= self._epilogue:
            raise ValueError(f"pointer {ptr} is outside the heap")
        size, free = self._tag(header)
        footer = header + HEADER_SIZE + size
        if footer + FOOTER_SIZE > self._epilogue or self._tag(footer) != (size, free):
            raise ValueError(f"pointer {ptr} does not address a block")
        if free:
            raise ValueError(f"pointer {ptr} is not allocated")
        return header

    # ------------------------------------------------------------------
    # free list, linked through the payloads of the free blocks

    def _links(self, header: int) -> tuple[int, int]:
        return _NODE.unpack_from(self._data, header + HEADER_SIZE)

    def _set_links(self, header: int, prev: int, nxt: int) -> None:
        _NODE.pack_into(self._data, header + HEADER_SIZE, prev, nxt)

    def _insert(self, header: int) -> None:
        head = _NIL if self._head is None else self._head
        self._set_links(header, _NIL, head)
        if self._head is not None:
            _, head_next = self._links(self._head)
            self._set_links(self._head, header, head_next)
        self._head = header

    def _remove(self, header: int) -> None:
        prev, nxt = self._links(header)
        if prev != _NIL:
            prev_prev, _ = self._links(prev)
            self._set_links(prev, prev_prev, nxt)
        else:
            self._head = None if nxt == _NIL else nxt
        if nxt != _NIL:
            _, next_next = self._links(nxt)
            self._set_links(nxt, prev, next_next)
        self._set_links(header, _NIL, _NIL)

    def _iter_free(self) -> Iterator[int]:
        header = self._head
        while header is not None:
            _, nxt = self._links(header)
            yield header
            header = None if nxt == _NIL else nxt

    def _coalesce(self, header: int) -> int:
        nxt = self._next(header)
        prev = self._prev(header)
        next_free = nxt != self._epilogue and self._tag(nxt)[1]
        prev_free = prev != self._prologue and self._tag(prev)[1]
        if not (prev_free or next_free):
            return header

        total = self._tag(header)[0]
        start = header
        self._remove(header)
        if prev_free:
            total += BLOCK_OVERHEAD + self._tag(prev)[0]
            self._remove(prev)
            start = prev
        if next_free:
            total += BLOCK_OVERHEAD + self._tag(nxt)[0]
            self._remove(nxt)
        self._set_tags(start, total, True)
        self._insert(start)
        return start

    def _split(self, header: int, needed: int) -> None:
        total = self._tag(header)[0]
        remainder = total - needed - BLOCK_OVERHEAD
        if remainder < MIN_ALLOC:
            return
        self._set_tags(header, needed, False)
        rest = self._next(header)
        self._set_tags(rest, remainder, True)
        self._insert(rest)

    # ------------------------------------------------------------------
    # public API

    def reset(self) -> None:
        """Discard every allocation and lay the heap out afresh."""
        self._data = bytearray(self.size)
        self._head: int | None = None

        self._prologue = 0
        self._set_tags(self._prologue, 0, False)
        self._first = self._prologue + BLOCK_OVERHEAD

        usable = (self.size - 3 * BLOCK_OVERHEAD) & ~(ALIGNMENT - 1)
        self._set_tags(self._first, usable, True)
        self._insert(self._first)

        self._epilogue = self._first + BLOCK_OVERHEAD + usable
        self._write_tag(self._epilogue, 0, False)

    def alloc(self, size: int) -> int | None:
        """Allocate *size* bytes; return the address, or None for size 0."""
        if size < 0:
            raise ValueError("size must not be negative")
        if size == 0:
            return None
        needed = max(_align(size), MIN_ALLOC)
        for header in self._iter_free():
            if self._tag(header)[0] >= needed:
                self._remove(header)
                self._split(header, needed)
                self._set_tags(header, self._tag(header)[0], False)
                return header + HEADER_SIZE
        raise HeapExhaustedError(f"out of memory allocating {size} bytes")

    def free(self, ptr: int | None) -> None:
        """Release the block at *ptr*; None is ignored."""
        if ptr is None:
            return
        header = self._header_of(ptr)
        size = self._tag(header)[0]
        self._set_tags(header, size, True)
        self._insert(header)
        self._coalesce(header)

    def calloc(self, n: int, size: int) -> int | None:
        """Allocate room for *n* items of *size* bytes, zero-filled."""
        total = n * size
        ptr = self.alloc(total)
        if ptr is not None:
            self._data[ptr:ptr + total] = bytes(total)
        return ptr

    def realloc(self, ptr: int | None, size: int) -> int | None:
        """Grow the block at *ptr* to hold *size* bytes, keeping its data."""
        if ptr is None:
            return self.alloc(size)
        if size < 0:
            raise ValueError("size must not be negative")
        if size == 0:
            self.free(ptr)
            return None
        header = self._header_of(ptr)
        current = self._tag(header)[0]
        if current >= _align(size):
            return ptr
        new_ptr = self.alloc(size)
        self._data[new_ptr:new_ptr + current] = self._data[ptr:ptr + current]
        self.free(ptr)
        return new_ptr

    def block_size(self, ptr: int) -> int:
        """Return the usable size of the allocated block at *ptr*."""
        return self._tag(self._header_of(ptr))[0]

    def read(self, ptr: int, length: int) -> bytes:
        """Return *length* bytes from the start of the block at *ptr*."""
        if length < 0 or length > self.block_size(ptr):
            raise ValueError(f"cannot read {length} bytes from block at {ptr}")
        return bytes(self._data[ptr:ptr + length])

    def write(self, ptr: int, data: bytes) -> None:
        """Copy *data* to the start of the block at *ptr*."""
        if len(data) > self.block_size(ptr):
            raise ValueError(f"cannot write {len(data)} bytes to block at {ptr}")
        self._data[ptr:ptr + len(data)] = data

    def blocks(self) -> Iterator[BlockInfo]:
        """Yield every block between the sentinels in address order."""
        header = self._first
        while header != self._epilogue:
            size, free = self._tag(header)
            yield BlockInfo(header + HEADER_SIZE, size, free)
            header += BLOCK_OVERHEAD + size

    def free_blocks(self) -> list[BlockInfo]:
        """Return the free blocks in free-list order, most recent first."""
        return [
            BlockInfo(header + HEADER_SIZE, *self._tag(header))
            for header in self._iter_free()
        ]

    def dump(self, file: TextIO | None = None) -> None:
        """Print every block with its address, size and state."""
        out = sys.stdout if file is None else file
        print("\n=== halloc heap dump ===", file=out)
        for number, block in enumerate(self.blocks()):
            state = "FREE" if block.free else "USED"
            print(
                f"  block {number:3d} | addr 0x{block.address - HEADER_SIZE:08x}"
                f" | size {block.size:6d} | {state}",
                file=out,
            )
        print("========================\n", file=out)