"""
Copyright (c) 2025. All rights reserved.
"""

"""
ActivationLayer: the layer-library face of ActivationOp.

A layer is set up from an input sample shape and a LayerConf, then run with
a phase flag. Only the training phase keeps forward state for backward.
"""

import logging
from enum import Enum
from functools import reduce
from typing import List, Optional, Sequence, Tuple

from activation.errors import InvalidConfiguration
from activation.op import ActivationOp
from devices.buffer import Buffer
from devices.device import Device
from lib.configs import LayerConf

logger = logging.getLogger(__name__)


class Phase(Enum):
    TRAIN = "train"
    EVAL = "eval"


class ActivationLayer:
    """Elementwise activation layer without parameters.

    Args:
        device (Device, optional): Device outputs are placed on, defaults to the input's device
        backend (str): Kernel backend passed to the operator
    """

    def __init__(self, device: Optional[Device] = None, backend: str = "torch"):
        self.device = device
        self.op = ActivationOp(backend=backend)
        self._in_shape: Optional[Tuple[int, ...]] = None

    @property
    def layer_type(self) -> str:
        return "Activation"

    def setup(self, in_shape: Sequence[int], conf: LayerConf) -> None:
        """Configure the layer for inputs of ``in_shape``.

        Raises:
            InvalidConfiguration: Unsupported type, bad slope or negative dimension
        """
        in_shape = tuple(int(d) for d in in_shape)
        if any(d < 0 for d in in_shape):
            raise InvalidConfiguration(f"invalid input shape {in_shape}")
        size = reduce(lambda a, b: a * b, in_shape, 1)
        self.op.configure(conf.to_activation(), size=size)
        self._in_shape = in_shape
        logger.info("Set up %s layer: mode=%s shape=%s", self.layer_type, self.mode, in_shape)

    @property
    def mode(self) -> str:
        return self._activation().mode

    @property
    def negative_slope(self) -> float:
        return getattr(self._activation(), "negative_slope", 0.0)

    @property
    def output_sample_shape(self) -> Tuple[int, ...]:
        if self._in_shape is None:
            raise InvalidConfiguration("layer has not been set up")
        return self._in_shape

    def forward(self, phase: Phase, input: Buffer) -> Buffer:
        return self.op.forward(input, device=self.device, cache=phase == Phase.TRAIN)

    def backward(self, phase: Phase, grad: Buffer) -> Tuple[Buffer, List[Buffer]]:
        """Returns the input gradient and the (empty) list of parameter gradients."""
        if phase != Phase.TRAIN:
            logger.warning("backward() called in %s phase", phase.value)
        return self.op.backward(grad, device=self.device), []

    def _activation(self):
        if self.op.activation is None:
            raise InvalidConfiguration("layer has not been set up")
        return self.op.activation
