"""
Copyright (c) 2025. All rights reserved.
"""

"""
Fixed-length float32 buffers resident on a Device.

Buffer is the only data type the activation operator reads and writes. It
supports the four capabilities the operator relies on: allocation on a
device, host-to-device copy, device-to-host copy and element reads.
"""

import logging
from typing import Optional, Sequence, Union

import numpy as np
import torch

from devices.device import DTYPE, Device, HostDevice, device_of

logger = logging.getLogger(__name__)


class Buffer:
    """One-dimensional contiguous float32 storage on a device.

    The element count is fixed at construction. Moving the buffer to another
    device replaces its storage but keeps the count.

    Args:
        size (int): Number of float32 elements
        device (Device, optional): Where the storage lives, host when omitted
    """

    def __init__(self, size: int, device: Optional[Device] = None):
        self._device = device if device is not None else HostDevice()
        self._tensor = self._device.allocate(size).zero_()
        self._size = size

    @classmethod
    def empty(cls, size: int, device: Optional[Device] = None) -> "Buffer":
        """Allocate without zero-filling; contents are undefined until written."""
        buffer = cls.__new__(cls)
        buffer._device = device if device is not None else HostDevice()
        buffer._tensor = buffer._device.allocate(size)
        buffer._size = size
        return buffer

    @classmethod
    def from_host(cls, values: Union[Sequence[float], np.ndarray], device: Optional[Device] = None) -> "Buffer":
        array = np.ascontiguousarray(values, dtype=np.float32).reshape(-1)
        buffer = cls.empty(array.size, device)
        buffer.copy_from_host(array)
        return buffer

    @classmethod
    def wrap(cls, tensor: torch.Tensor, device: Optional[Device] = None) -> "Buffer":
        """Copy an existing tensor into a new buffer (flattened, cast to float32).

        The caller keeps sole ownership of ``tensor``; releasing the buffer never
        hands the caller's storage to a memory pool.
        """
        tensor = tensor.detach().reshape(-1).to(DTYPE).contiguous()
        buffer = cls.__new__(cls)
        buffer._device = device if device is not None else device_of(tensor)
        buffer._tensor = tensor.to(buffer._device.torch_device, copy=True)
        buffer._size = tensor.numel()
        return buffer

    @property
    def size(self) -> int:
        return self._size

    @property
    def device(self) -> Device:
        return self._device

    @property
    def dtype(self) -> torch.dtype:
        return self._tensor.dtype

    @property
    def tensor(self) -> torch.Tensor:
        """The underlying storage. Writes through it modify the buffer."""
        return self._tensor

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, index: int) -> float:
        if not -self._size <= index < self._size:
            raise IndexError(f"index {index} out of range for buffer of size {self._size}")
        return float(self._tensor[index].item())

    def copy_from_host(self, values: Union[Sequence[float], np.ndarray]) -> None:
        """Copy host values into the buffer. Blocks until the copy is complete.

        Raises:
            ValueError: If the number of values differs from the buffer size
        """
        array = np.ascontiguousarray(values, dtype=np.float32).reshape(-1)
        if array.size != self._size:
            raise ValueError(f"cannot copy {array.size} values into a buffer of size {self._size}")
        self._tensor.copy_(torch.from_numpy(array))
        self._device.synchronize()

    def to_host(self) -> np.ndarray:
        """Copy the buffer contents to a new host array."""
        return self._tensor.detach().cpu().numpy().copy()

    def to_device(self, device: Device) -> "Buffer":
        """Move the storage to ``device`` in place and return self."""
        if device == self._device:
            return self
        logger.debug("Moving buffer of %d elements from %s to %s", self._size, self._device, device)
        storage = device.allocate(self._size)
        storage.copy_(self._tensor)
        device.synchronize()
        self._device.release(self._tensor)
        self._tensor = storage
        self._device = device
        return self

    def clone(self) -> "Buffer":
        buffer = Buffer.empty(self._size, self._device)
        buffer._tensor.copy_(self._tensor)
        return buffer

    def release(self) -> None:
        """Hand the storage back to the device pool. The buffer must not be used afterwards."""
        self._device.release(self._tensor)
        self._tensor = None

    def __repr__(self):
        return f"Buffer(size={self._size}, device={self._device})"
