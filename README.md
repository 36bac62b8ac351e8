# halloc

A heap allocator simulated over a fixed-size `bytearray`. Every block has a
16-byte header and a 16-byte footer. Each one holds the block's payload size,
and the lowest bit of that size marks the block as free. Free blocks sit on an
explicit doubly linked free list, which is stored inside their own payloads.
Allocation takes the first block that fits. A block is split when the
remainder is at least 16 bytes. A freed block is merged with free neighbours.
Each pointer returned is an integer offset into the heap and is 16-byte
aligned.

## Installation

```
pip install .
```

## Usage

```python
from halloc.heap import Heap, HeapExhaustedError

heap = Heap()                    # 16 MiB by default; Heap(size) for another size

ptr = heap.alloc(100)            # 16-byte aligned offset
heap.write(ptr, b"hello")
assert heap.read(ptr, 5) == b"hello"

zeros = heap.calloc(10, 4)       # 40 zeroed bytes
bigger = heap.realloc(ptr, 256)  # moves the block if it is too small, keeping its contents

heap.free(zeros)
heap.free(bigger)

for block in heap.blocks():      # BlockInfo(address, size, free), in address order
    print(block)

heap.dump()                      # prints every block with its offset, size and status
heap.reset()                     # back to one large free block
```

Behaviour at the edges:

- `alloc(0)` returns `None`.
- A negative size raises `ValueError`.
- `HeapExhaustedError`, a subclass of `MemoryError`, is raised when no free block is large enough.
- `free(None)` does nothing.
- Freeing or resizing a pointer that does not address an allocated block raises `ValueError`.
- `realloc(None, size)` behaves like `alloc(size)`.
- `realloc(ptr, 0)` frees the block and returns `None`.
- `realloc` never shrinks a block. If the block is already large enough, the same pointer comes back.

`block_size(ptr)` gives the usable size of an allocated block, which can be
larger than the size requested. `free_blocks()` lists the blocks on the free
list, with the most recently freed first. `read` and `write` raise `ValueError`
for a request that would go past the end of the block.

## Benchmarks

The package includes a small benchmark that compares this allocator with
Python `bytearray` buffers. It runs three workloads: 64-byte allocations,
mixed sizes from 8 to 1024 bytes, and interleaved allocation and freeing.

```
halloc-bench
halloc-bench --iterations 10000
```

`-n`/`--iterations` sets the number of operations per test (the default is
50000). To run the benchmarks from code, call `halloc.bench.run_benchmarks`,
which prints the report and returns a list of `BenchResult` objects.

## Limitations

The heap is a `bytearray` inside the Python process. It does not replace
Python's own memory management and it does not give native memory to other
code. Its size is fixed when the `Heap` is created, and the heap never grows.

## Tests

```
pip install .[test]
pytest
```