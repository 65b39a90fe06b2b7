"""
Copyright (c) 2025. All rights reserved.
"""

"""
Configuration dataclasses for activation layers and experiments.

LayerConf/ReLUConf mirror the layer configuration a layer library hands to
its layers at setup time. ActivationConfig groups everything the demo and
monitoring tools need to build an operator on a device.
"""

from dataclasses import dataclass
from typing import Optional

from activation.kinds import Activation, get_activation


@dataclass
class ReLUConf:
    """
    ReLU-specific parameters.

    Attributes:
        negative_slope (float): Slope for negative inputs
        leaky (bool): Whether the slope is applied (plain ReLU otherwise)
    """
    negative_slope: float = 0.0   # Slope for x < 0
    leaky: bool = False           # Apply the slope


@dataclass
class LayerConf:
    """
    Configuration handed to ActivationLayer.setup().

    Attributes:
        type (str): Activation type, e.g. "SIGMOID", "TANH", "RELU"
        relu_conf (ReLUConf, optional): ReLU parameters, created on demand

    Example:
        conf = LayerConf(type="RELU")
        conf.mutable_relu_conf().negative_slope = 0.5
    """
    type: str
    relu_conf: Optional[ReLUConf] = None

    def mutable_relu_conf(self) -> ReLUConf:
        if self.relu_conf is None:
            self.relu_conf = ReLUConf()
        return self.relu_conf

    def to_activation(self) -> Activation:
        relu_conf = self.relu_conf or ReLUConf()
        return get_activation(self.type, negative_slope=relu_conf.negative_slope, leaky=relu_conf.leaky)


@dataclass
class ActivationConfig:
    """
    Complete configuration for running an activation operator.

    Attributes:
        activation (str): Activation name ("sigmoid", "tanh", "relu", "leakyrelu")
        negative_slope (float): Slope for negative inputs, ReLU only
        leaky (bool): Apply the slope, ReLU only
        backend (str): Kernel backend ("torch", "numpy")
        device (str): Device name ("cpu", "cuda", "cuda:N", "auto")
        log_dir (str, optional): TensorBoard directory, monitoring disabled when None

    Example:
        config = ActivationConfig(activation="relu", negative_slope=0.5, device="cpu")
    """
    activation: str
    negative_slope: float = 0.0
    leaky: bool = False
    backend: str = "torch"
    device: str = "auto"
    log_dir: Optional[str] = None

    def to_activation(self) -> Activation:
        return get_activation(self.activation, negative_slope=self.negative_slope, leaky=self.leaky)
