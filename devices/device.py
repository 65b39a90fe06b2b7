"""
Copyright (c) 2025. All rights reserved.
"""

"""
Execution devices: host memory and CUDA accelerators.

A Device knows where storage lives and how to allocate it; it does not know
about the Buffer type built on top of that storage.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import torch

from devices.memory_pool import MemoryPool

logger = logging.getLogger(__name__)

DTYPE = torch.float32


class Device(ABC):
    """Base class for execution devices.

    Args:
        pool (MemoryPool, optional): Pool used to recycle released storage
    """

    def __init__(self, pool: Optional[MemoryPool] = None):
        self.pool = pool

    @property
    @abstractmethod
    def torch_device(self) -> torch.device:
        pass

    @property
    def is_accelerator(self) -> bool:
        return False

    def allocate(self, size: int) -> torch.Tensor:
        """Allocate uninitialised float32 storage for ``size`` elements."""
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")
        shape: Tuple[int, ...] = (size,)
        if self.pool is not None:
            return self.pool.allocate(shape, self.torch_device, DTYPE)
        return torch.empty(shape, device=self.torch_device, dtype=DTYPE)

    def release(self, storage: torch.Tensor) -> None:
        if self.pool is not None:
            self.pool.deallocate(storage)

    def synchronize(self) -> None:
        pass

    def __eq__(self, other):
        return isinstance(other, Device) and self.torch_device == other.torch_device

    def __hash__(self):
        return hash(self.torch_device)

    def __repr__(self):
        return f"{type(self).__name__}({self.torch_device})"


class HostDevice(Device):
    """CPU memory."""

    @property
    def torch_device(self) -> torch.device:
        return torch.device("cpu")


class CudaDevice(Device):
    """Memory of one CUDA GPU.

    Args:
        device_id (int): CUDA ordinal
        pool (MemoryPool, optional): Pool used to recycle released storage

    Raises:
        RuntimeError: If CUDA is not available or the ordinal does not exist
    """

    def __init__(self, device_id: int = 0, pool: Optional[MemoryPool] = None):
        super().__init__(pool)
        if not torch.cuda.is_available():
            raise RuntimeError("CUDA is not available on this machine")
        if not 0 <= device_id < torch.cuda.device_count():
            raise RuntimeError(
                f"CUDA device {device_id} does not exist ({torch.cuda.device_count()} visible)"
            )
        self.device_id = device_id
        logger.debug("Using CUDA device %d: %s", device_id, torch.cuda.get_device_name(device_id))

    @property
    def torch_device(self) -> torch.device:
        return torch.device("cuda", self.device_id)

    @property
    def is_accelerator(self) -> bool:
        return True

    def synchronize(self) -> None:
        torch.cuda.synchronize(self.torch_device)


def get_device(name: str = "auto", pool: Optional[MemoryPool] = None) -> Device:
    """Factory for devices.

    Args:
        name (str): 'cpu', 'cuda', 'cuda:N' or 'auto' (CUDA when available, else host)
        pool (MemoryPool, optional): Pool attached to the device

    Returns:
        Device: The requested device

    Raises:
        ValueError: If name is not recognised
        RuntimeError: If a CUDA device is requested but unavailable
    """
    key = name.strip().lower()
    if key == "auto":
        key = "cuda" if torch.cuda.is_available() else "cpu"

    if key == "cpu":
        return HostDevice(pool)
    elif key == "cuda":
        return CudaDevice(0, pool)
    elif key.startswith("cuda:"):
        try:
            device_id = int(key.split(":", 1)[1])
        except ValueError:
            raise ValueError(f"Invalid CUDA device name: {name}") from None
        return CudaDevice(device_id, pool)
    else:
        raise ValueError(f"Unsupported device: {name}. Supported devices: cpu, cuda, cuda:N, auto")


def device_of(tensor: torch.Tensor) -> Device:
    """Device wrapper matching the location of an existing tensor."""
    if tensor.device.type == "cuda":
        return CudaDevice(tensor.device.index or 0)
    return HostDevice()
