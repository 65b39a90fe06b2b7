"""
Copyright (c) 2025. All rights reserved.
"""

"""
ActivationOp: elementwise activation over device-resident buffers.

The operator is configured once with an activation variant, then runs
forward and backward passes. forward() caches the tensor backward() needs:
the output for Sigmoid and Tanh, the input for (Leaky)ReLU.

    UNCONFIGURED --configure--> CONFIGURED --forward--> FORWARDED
                                     ^                      |
                                     +---configure/reset----+

A forward with cache=False also returns the op to CONFIGURED.

backward() requires FORWARDED and leaves the state unchanged, so it can be
called repeatedly against the same forward pass. An instance is not safe to
share between threads without external locking.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

import torch

from activation.errors import InvalidConfiguration, LengthMismatch, PrecondMissingForward
from activation.kernels import Kernels, get_kernels
from activation.kinds import Activation, ActivationKind, LeakyReLU, Sigmoid, Tanh, get_activation
from devices.buffer import Buffer
from devices.device import Device

if TYPE_CHECKING:
    from activation.monitor import ActivationMonitor

logger = logging.getLogger(__name__)


class OpState(Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    FORWARDED = "forwarded"


class ActivationOp:
    """Elementwise activation with a cached forward pass.

    Args:
        activation (Activation | ActivationKind | str, optional): Configure immediately
        backend (str): Kernel backend, 'torch' or 'numpy'
        monitor (ActivationMonitor, optional): Receives statistics after every forward

    Example:
        op = ActivationOp("sigmoid")
        y = op.forward(Buffer.from_host([1.0, -2.0]))
        dx = op.backward(Buffer.from_host([1.0, 1.0]))
    """

    def __init__(
        self,
        activation: Union[Activation, ActivationKind, str, None] = None,
        backend: str = "torch",
        monitor: Optional["ActivationMonitor"] = None,
        negative_slope: float = 0.0,
        leaky: bool = False,
        size: Optional[int] = None,
    ):
        self._kernels: Kernels = get_kernels(backend)
        self._activation: Optional[Activation] = None
        self._size: Optional[int] = None
        self._saved: Optional[torch.Tensor] = None
        self._saved_device: Optional[Device] = None
        self._step = 0
        self.monitor = monitor
        if activation is not None:
            self.configure(activation, negative_slope=negative_slope, leaky=leaky, size=size)

    def configure(
        self,
        activation: Union[Activation, ActivationKind, str],
        negative_slope: float = 0.0,
        leaky: bool = False,
        size: Optional[int] = None,
        backend: Optional[str] = None,
    ) -> "ActivationOp":
        """Select the activation and discard any cached forward pass.

        Args:
            activation: Variant instance, kind or name. Slope arguments are
                        ignored when a variant instance is given.
            negative_slope (float): Slope for negative inputs, ReLU only
            leaky (bool): Apply the slope, ReLU only
            size (int, optional): Expected element count of forward inputs
            backend (str, optional): Switch kernel backend

        Raises:
            InvalidConfiguration: Unknown kind or backend, non-finite slope, negative size
        """
        if isinstance(activation, (Sigmoid, Tanh, LeakyReLU)):
            variant = activation
        else:
            variant = get_activation(activation, negative_slope=negative_slope, leaky=leaky)
        if size is not None and size < 0:
            raise InvalidConfiguration(f"size must be non-negative, got {size}")
        if backend is not None:
            self._kernels = get_kernels(backend)

        self._activation = variant
        self._size = size
        self._step = 0
        self.reset()
        logger.debug("Configured %s (backend=%s, size=%s)", variant, self._kernels.name, size)
        return self

    def reset(self) -> None:
        """Drop the cached forward pass."""
        self._saved = None
        self._saved_device = None

    @property
    def activation(self) -> Optional[Activation]:
        return self._activation

    @property
    def backend(self) -> str:
        return self._kernels.name

    @property
    def size(self) -> Optional[int]:
        return self._size

    @property
    def state(self) -> OpState:
        if self._activation is None:
            return OpState.UNCONFIGURED
        if self._saved is None:
            return OpState.CONFIGURED
        return OpState.FORWARDED

    def forward(self, input: Buffer, device: Optional[Device] = None, cache: bool = True) -> Buffer:
        """Apply the activation to every element of ``input``.

        Args:
            input (Buffer): Input values
            device (Device, optional): Where to put the output, defaults to the input's device
            cache (bool): Keep state for backward(); a forward without caching
                          discards any earlier cache

        Returns:
            Buffer: New buffer of the same length, owned by the caller

        Raises:
            InvalidConfiguration: If the op is not configured
            LengthMismatch: If input does not match the configured size
        """
        activation = self._require_configured()
        if self._size is not None and input.size != self._size:
            raise LengthMismatch(self._size, input.size, "forward input")

        target = device if device is not None else input.device
        x = input.tensor
        output = Buffer.empty(input.size, input.device)
        self._kernels.forward(activation, x, output.tensor)

        if cache:
            saved = output.tensor if self._kernels.saves_output(activation) else x
            # Detach from the caller's buffer so later writes to it cannot change backward().
            self._saved = saved.clone()
            self._saved_device = input.device
        else:
            self.reset()

        if self.monitor is not None:
            self.monitor.record(activation, x, output.tensor, step=self._step)
        self._step += 1

        if target != input.device:
            output.to_device(target)
        return output

    def backward(self, grad_output: Buffer, device: Optional[Device] = None) -> Buffer:
        """Gradient of the loss with respect to the cached forward input.

        Args:
            grad_output (Buffer): Upstream gradient, same length as the forward input
            device (Device, optional): Where to put the result, defaults to the forward device

        Returns:
            Buffer: New gradient buffer owned by the caller

        Raises:
            InvalidConfiguration: If the op is not configured
            PrecondMissingForward: If no forward pass is cached
            LengthMismatch: If grad_output length differs from the cached length
        """
        activation = self._require_configured()
        if self._saved is None:
            raise PrecondMissingForward("backward() called without a cached forward pass")
        n = self._saved.numel()
        if grad_output.size != n:
            raise LengthMismatch(n, grad_output.size, "grad_output")

        dy = grad_output.tensor
        if dy.device != self._saved.device:
            dy = dy.to(self._saved.device)
        grad_input = Buffer.empty(n, self._saved_device)
        self._kernels.backward(activation, self._saved, dy, grad_input.tensor)

        if device is not None and device != self._saved_device:
            grad_input.to_device(device)
        return grad_input

    def _require_configured(self) -> Activation:
        if self._activation is None:
            raise InvalidConfiguration("activation op is not configured")
        return self._activation

    def __repr__(self):
        return f"ActivationOp({self._activation}, backend={self.backend}, state={self.state.value})"
