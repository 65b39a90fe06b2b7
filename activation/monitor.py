"""
Copyright (c) 2025. All rights reserved.
"""

"""
Activation statistics for TensorBoard.

Saturated sigmoid/tanh units and dead ReLU units pass almost no gradient, so
the fraction of such elements is the most useful single number to watch
while training.
"""

from typing import Dict

import torch

from activation.kinds import Activation, LeakyReLU, Sigmoid, Tanh
from lib.logger import Logger


class ActivationMonitor:
    """Records per-forward statistics of an activation op.

    Args:
        logger (Logger): TensorBoard destination
        tag (str): Prefix for every logged name
        saturation_threshold (float): Distance from the asymptote that counts as saturated
        log_histograms (bool): Also log the output distribution
    """

    def __init__(
        self,
        logger: Logger,
        tag: str = "activation",
        saturation_threshold: float = 0.01,
        log_histograms: bool = True,
    ):
        self.logger = logger
        self.tag = tag
        self.saturation_threshold = saturation_threshold
        self.log_histograms = log_histograms

    def statistics(self, activation: Activation, input: torch.Tensor, output: torch.Tensor) -> Dict[str, float]:
        y = output.detach().float()
        stats = {
            f"{self.tag}/mean": y.mean().item() if y.numel() else 0.0,
            f"{self.tag}/std": y.std().item() if y.numel() > 1 else 0.0,
        }
        if isinstance(activation, Sigmoid):
            saturated = (y < self.saturation_threshold) | (y > 1.0 - self.saturation_threshold)
            stats[f"{self.tag}/saturated_fraction"] = _fraction(saturated)
        elif isinstance(activation, Tanh):
            saturated = y.abs() > 1.0 - self.saturation_threshold
            stats[f"{self.tag}/saturated_fraction"] = _fraction(saturated)
        elif isinstance(activation, LeakyReLU):
            stats[f"{self.tag}/dead_fraction"] = _fraction(input.detach() <= 0)
        return stats

    def record(self, activation: Activation, input: torch.Tensor, output: torch.Tensor, step: int = 0) -> None:
        self.logger.log_scalars(self.statistics(activation, input, output), step)
        if self.log_histograms and output.numel():
            self.logger.log_histogram(f"{self.tag}/output", output, step)


def _fraction(mask: torch.Tensor) -> float:
    if mask.numel() == 0:
        return 0.0
    return mask.float().mean().item()
