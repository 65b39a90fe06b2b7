"""
Utility functions: seeding and activation curve plots.
"""

import random

import matplotlib.pyplot as plt
import numpy as np
import torch

from activation.kinds import Activation
from activation.op import ActivationOp
from devices.buffer import Buffer
from devices.device import Device
from lib.logger import Logger


def activation_curves(
    activation: Activation,
    x_min: float = -6.0,
    x_max: float = 6.0,
    num_points: int = 241,
    device: Device = None,
    backend: str = "torch",
):
    """Evaluate an activation and its derivative over an evenly spaced range.

    The derivative is the backward pass of an all-ones upstream gradient.

    Returns:
        Tuple[np.ndarray, np.ndarray, np.ndarray]: x, y and dy/dx on the host
    """
    xs = np.linspace(x_min, x_max, num_points, dtype=np.float32)
    op = ActivationOp(activation, backend=backend)
    y = op.forward(Buffer.from_host(xs, device))
    dydx = op.backward(Buffer.from_host(np.ones_like(xs), device))
    return xs, y.to_host(), dydx.to_host()


def plot_activation_curves(
    activation: Activation,
    logger: Logger,
    x_min: float = -6.0,
    x_max: float = 6.0,
    num_points: int = 241,
    device: Device = None,
    backend: str = "torch",
) -> None:
    """Plot an activation and its derivative and log the figure to TensorBoard.

    Args:
        activation (Activation): Variant to plot
        logger (Logger): Destination of the figure, tagged "curves/<mode>"
        x_min (float): Left end of the plotted range
        x_max (float): Right end of the plotted range
        num_points (int): Number of samples
        device (Device, optional): Device the op runs on
        backend (str): Kernel backend
    """
    xs, ys, dydx = activation_curves(activation, x_min, x_max, num_points, device, backend)

    fig, ax = plt.subplots()
    ax.plot(xs, ys, color="blue", label="y")
    ax.plot(xs, dydx, color="red", linestyle="--", label="dy/dx")
    ax.set_xlabel("x")
    ax.set_ylabel("value")
    ax.legend()
    ax.set_title(f"{activation.mode} forward and backward")

    logger.log_figure("curves/" + activation.mode.lower(), fig)
    plt.close(fig)


def set_seed(random_seed: int) -> None:
    """Set random seeds for reproducible experiments.

    Sets the random seed for Python's random module, PyTorch, and NumPy so
    randomly generated activation inputs are identical across runs.

    Args:
        random_seed (int): Seed value to use for all random number generators

    Example:
        set_seed(42)
        data = torch.rand(100)  # Will generate same data every time
    """
    random.seed(random_seed)
    torch.manual_seed(random_seed)
    np.random.seed(random_seed)
