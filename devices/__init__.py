"""
Copyright (c) 2025. All rights reserved.
"""

"""
Execution devices and the float32 buffers that live on them.
"""

from devices.buffer import Buffer
from devices.device import CudaDevice, Device, HostDevice, get_device
from devices.memory_pool import MemoryPool
