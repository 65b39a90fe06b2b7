"""
Copyright (c) 2025. All rights reserved.
"""

"""
Elementwise activation kernels.

Two backends compute the same math:

- TorchKernels runs on the device the tensors live on (CPU or CUDA).
- NumpyKernels is host reference math; it round-trips through host memory.

Both write into a caller-provided output tensor and return only once the
result is in place. The autograd Functions at the bottom expose the same
math to torch graphs.
"""

from abc import ABC, abstractmethod

import numpy as np
import torch

from activation.errors import InvalidConfiguration
from activation.kinds import Activation, LeakyReLU, Sigmoid, Tanh


class Kernels(ABC):
    """Backend interface: forward and backward for every activation variant."""

    name: str

    @abstractmethod
    def forward(self, activation: Activation, x: torch.Tensor, out: torch.Tensor) -> torch.Tensor:
        """Write activation(x) into out and return out."""

    @abstractmethod
    def backward(
        self, activation: Activation, saved: torch.Tensor, grad_output: torch.Tensor, out: torch.Tensor
    ) -> torch.Tensor:
        """Write the input gradient into out and return out.

        ``saved`` is the forward output for Sigmoid and Tanh and the forward
        input for LeakyReLU.
        """

    @staticmethod
    def saves_output(activation: Activation) -> bool:
        """Whether backward needs the forward output (True) or the input (False)."""
        return not isinstance(activation, LeakyReLU)


class TorchKernels(Kernels):
    name = "torch"

    def forward(self, activation, x, out):
        if isinstance(activation, Sigmoid):
            torch.sigmoid(x, out=out)
        elif isinstance(activation, Tanh):
            torch.tanh(x, out=out)
        elif isinstance(activation, LeakyReLU):
            if activation.leaky:
                torch.where(x >= 0, x, x * activation.negative_slope, out=out)
            else:
                torch.clamp(x, min=0.0, out=out)
        else:
            raise InvalidConfiguration(f"Unsupported activation: {activation!r}")
        _synchronize(out)
        return out

    def backward(self, activation, saved, grad_output, out):
        if isinstance(activation, Sigmoid):
            # dσ/dx = σ(x)(1 - σ(x))
            torch.mul(grad_output * saved, 1.0 - saved, out=out)
        elif isinstance(activation, Tanh):
            # d/dx tanh(x) = 1 - tanh²(x)
            torch.mul(grad_output, 1.0 - saved * saved, out=out)
        elif isinstance(activation, LeakyReLU):
            # x == 0 takes the non-positive branch
            torch.where(saved > 0, grad_output, grad_output * activation.effective_slope, out=out)
        else:
            raise InvalidConfiguration(f"Unsupported activation: {activation!r}")
        _synchronize(out)
        return out


class NumpyKernels(Kernels):
    name = "numpy"

    def forward(self, activation, x, out):
        xh = _host(x)
        if isinstance(activation, Sigmoid):
            # exp overflows to inf for x < -88.7, giving the correct limit of 0
            with np.errstate(over="ignore"):
                y = 1.0 / (1.0 + np.exp(-xh))
        elif isinstance(activation, Tanh):
            y = np.tanh(xh)
        elif isinstance(activation, LeakyReLU):
            y = np.where(xh >= 0, xh, xh * np.float32(activation.effective_slope))
        else:
            raise InvalidConfiguration(f"Unsupported activation: {activation!r}")
        return _store(y, out)

    def backward(self, activation, saved, grad_output, out):
        s, dy = _host(saved), _host(grad_output)
        if isinstance(activation, Sigmoid):
            dx = dy * s * (1.0 - s)
        elif isinstance(activation, Tanh):
            dx = dy * (1.0 - s * s)
        elif isinstance(activation, LeakyReLU):
            dx = np.where(s > 0, dy, dy * np.float32(activation.effective_slope))
        else:
            raise InvalidConfiguration(f"Unsupported activation: {activation!r}")
        return _store(dx, out)


def _host(tensor: torch.Tensor) -> np.ndarray:
    return tensor.detach().cpu().numpy().astype(np.float32, copy=False)


def _store(values: np.ndarray, out: torch.Tensor) -> torch.Tensor:
    out.copy_(torch.from_numpy(np.ascontiguousarray(values, dtype=np.float32)))
    _synchronize(out)
    return out


def _synchronize(tensor: torch.Tensor) -> None:
    if tensor.is_cuda:
        torch.cuda.synchronize(tensor.device)


_KERNELS = {
    "torch": TorchKernels,
    "numpy": NumpyKernels,
}


def get_kernels(name: str) -> Kernels:
    """Factory for kernel backends ('torch' or 'numpy')."""
    try:
        return _KERNELS[name.strip().lower()]()
    except KeyError:
        raise InvalidConfiguration(
            f"Unsupported kernel backend: {name}. Supported backends: {', '.join(_KERNELS)}"
        ) from None


class SigmoidFunction(torch.autograd.Function):
    """Sigmoid with a backward pass that reuses the forward output."""

    @staticmethod
    def forward(ctx, input: torch.Tensor) -> torch.Tensor:
        output = torch.sigmoid(input)
        ctx.save_for_backward(output)
        return output

    @staticmethod
    def backward(ctx, grad_output: torch.Tensor) -> torch.Tensor:
        (output,) = ctx.saved_tensors
        return grad_output * output * (1 - output)


class TanhFunction(torch.autograd.Function):
    """Tanh with a backward pass that reuses the forward output."""

    @staticmethod
    def forward(ctx, input: torch.Tensor) -> torch.Tensor:
        output = torch.tanh(input)
        ctx.save_for_backward(output)
        return output

    @staticmethod
    def backward(ctx, grad_output: torch.Tensor) -> torch.Tensor:
        (output,) = ctx.saved_tensors
        return grad_output * (1 - output**2)


class LeakyReLUFunction(torch.autograd.Function):
    """(Leaky) ReLU: forward keeps x >= 0, backward passes gradient only where x > 0.

    The slope argument is a plain float and receives no gradient.
    """

    @staticmethod
    def forward(ctx, input: torch.Tensor, negative_slope: float) -> torch.Tensor:
        ctx.save_for_backward(input)
        ctx.negative_slope = negative_slope
        return torch.where(input >= 0, input, input * negative_slope)

    @staticmethod
    def backward(ctx, grad_output: torch.Tensor):
        (input,) = ctx.saved_tensors
        grad_input = torch.where(input > 0, grad_output, grad_output * ctx.negative_slope)
        return grad_input, None


def apply_activation(activation: Activation, input: torch.Tensor) -> torch.Tensor:
    """Apply an activation variant inside a torch autograd graph."""
    if isinstance(activation, Sigmoid):
        return SigmoidFunction.apply(input)
    elif isinstance(activation, Tanh):
        return TanhFunction.apply(input)
    elif isinstance(activation, LeakyReLU):
        return LeakyReLUFunction.apply(input, activation.effective_slope)
    raise InvalidConfiguration(f"Unsupported activation: {activation!r}")
