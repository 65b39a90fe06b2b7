"""
Copyright (c) 2025. All rights reserved.
"""

"""
TensorBoard logging utilities for activation monitoring.

This module provides a Logger class that wraps PyTorch's SummaryWriter to
log activation statistics, histograms and figures to TensorBoard. Scalars
are also echoed through the standard logging module.
"""

import logging
import os
from typing import Optional, Union

import numpy as np
import torch
from matplotlib.figure import Figure
from torch.utils.tensorboard import SummaryWriter

console = logging.getLogger(__name__)


class Logger:
    """
    TensorBoard logging wrapper.

    Provides convenient methods to log scalars, histograms and matplotlib
    figures to TensorBoard while also emitting scalars as INFO log records.
    """

    def __init__(self, log_dir: str, run_name: Optional[str] = None):
        """
        Initialize the Logger with TensorBoard SummaryWriter.

        Args:
            log_dir (str): Base directory for TensorBoard logs
            run_name (str, optional): Name for this specific run. Creates subdirectory if provided.
        """
        if run_name:
            self.log_dir = os.path.join(log_dir, run_name)
        else:
            self.log_dir = log_dir
        self.writer = SummaryWriter(self.log_dir)

    def log_scalars(self, scalar_dict: dict[str, Union[int, float]], step: int = 0) -> None:
        """
        Log scalar values to TensorBoard and to the console logger.

        Args:
            scalar_dict (dict): Dictionary of metric names and values
            step (int): Global step number for TensorBoard timeline
        """
        for k, v in scalar_dict.items():
            self.writer.add_scalar(k, v, step)
        console.info(", ".join(f"{k}:{v}" for k, v in scalar_dict.items()))

    def log_histogram(self, tag: str, values: Union[torch.Tensor, np.ndarray], step: int = 0) -> None:
        """
        Log the distribution of a tensor to TensorBoard.

        Args:
            tag (str): Name/tag for the histogram
            values (Tensor | ndarray): Values to bin, moved to host if needed
            step (int): Global step number for TensorBoard timeline
        """
        if isinstance(values, torch.Tensor):
            values = values.detach().cpu().numpy()
        self.writer.add_histogram(tag, values, step)

    def log_figure(self, tag: str, fig: Figure, step: int = 0) -> None:
        """
        Log matplotlib figure to TensorBoard.

        Args:
            tag (str): Name/tag for the figure in TensorBoard
            fig (Figure): Matplotlib figure object to log
            step (int): Global step number for TensorBoard timeline
        """
        self.writer.add_figure(tag, fig, step)

    def close(self) -> None:
        """
        Close the TensorBoard writer and flush any remaining data.
        Should be called when logging is complete to ensure all data is written.
        """
        self.writer.close()

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
