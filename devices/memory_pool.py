"""
Copyright (c) 2025. All rights reserved.
"""

"""
Free-list memory pool for device buffers.

Released tensors are kept in per-(device, dtype, shape) buckets and handed
back out on the next allocation with a matching key.
"""

import threading
from collections import defaultdict, deque
from typing import Deque, Dict, Tuple

import torch


class MemoryPool:
    def __init__(self, max_per_bucket: int):
        if max_per_bucket < 0:
            raise ValueError(f"max_per_bucket must be non-negative, got {max_per_bucket}")
        self.lock = threading.Lock()
        self.max_per_bucket = max_per_bucket
        self.buckets: Dict[Tuple[torch.device, torch.dtype, Tuple[int, ...]], Deque[torch.Tensor]] = defaultdict(deque)

        # markers to track allocations and deallocations
        self._allocations = 0
        self._deallocations = 0
        self._reused = 0

    def allocate(self, shape: Tuple[int, ...], device: torch.device, dtype: torch.dtype) -> torch.Tensor:
        key = (torch.device(device), dtype, tuple(shape))
        with self.lock:
            bucket = self.buckets.get(key)
            if bucket:
                self._reused += 1
                return bucket.pop()
            self._allocations += 1
        return torch.empty(shape, device=device, dtype=dtype)

    def allocate_like(self, tensor: torch.Tensor, copy: bool = True) -> torch.Tensor:
        t = self.allocate(tuple(tensor.shape), tensor.device, tensor.dtype)
        if copy:
            t.copy_(tensor)
        return t

    def deallocate(self, tensor: torch.Tensor) -> bool:
        """Return a tensor to its bucket. Returns False if the bucket is full."""
        if tensor.requires_grad:
            tensor = tensor.detach()

        key = (tensor.device, tensor.dtype, tuple(tensor.shape))
        with self.lock:
            if len(self.buckets[key]) < self.max_per_bucket:
                self.buckets[key].append(tensor)
                self._deallocations += 1
                return True
        return False

    def stats(self):
        with self.lock:
            return {
                "allocations": self._allocations,
                "deallocations": self._deallocations,
                "reused": self._reused,
                "num_buckets": len(self.buckets),
                "bucket_sizes": {k: len(v) for k, v in self.buckets.items()},
            }
