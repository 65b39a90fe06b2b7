"""
Copyright (c) 2025. All rights reserved.
"""

"""
Activation variants: Sigmoid, Tanh, LeakyReLU

Each variant is an immutable dataclass. Only LeakyReLU carries parameters,
so the slope cannot be attached to a kind that ignores it.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Union

from activation.errors import InvalidConfiguration


class ActivationKind(Enum):
    """Supported elementwise activations, valued by their mode name."""

    SIGMOID = "sigmoid"
    TANH = "tanh"
    LEAKY_RELU = "relu"


@dataclass(frozen=True)
class Sigmoid:
    """σ(x) = 1/(1 + e^(-x))"""

    kind = ActivationKind.SIGMOID

    @property
    def mode(self) -> str:
        return "SIGMOID"


@dataclass(frozen=True)
class Tanh:
    """tanh(x)"""

    kind = ActivationKind.TANH

    @property
    def mode(self) -> str:
        return "TANH"


@dataclass(frozen=True)
class LeakyReLU:
    """Rectified linear unit with an optional negative slope.

    The slope is always recorded. It only changes the result for negative
    inputs when ``leaky`` is set; otherwise negative inputs map to zero in
    forward and receive zero gradient in backward, the same as an accelerator
    library's plain ReLU mode.

    Attributes:
        negative_slope (float): Multiplier for x < 0, must be finite
        leaky (bool): Whether the slope is applied
    """

    negative_slope: float = 0.0
    leaky: bool = False

    kind = ActivationKind.LEAKY_RELU

    def __post_init__(self):
        if not math.isfinite(self.negative_slope):
            raise InvalidConfiguration(f"negative_slope must be finite, got {self.negative_slope}")

    @property
    def mode(self) -> str:
        return "RELU"

    @property
    def effective_slope(self) -> float:
        return self.negative_slope if self.leaky else 0.0


Activation = Union[Sigmoid, Tanh, LeakyReLU]


def get_activation(
    name: Union[str, ActivationKind], negative_slope: float = 0.0, leaky: bool = False
) -> Activation:
    """Factory function for creating activation variants.

    Args:
        name (str | ActivationKind): Activation identifier, case-insensitive. Supported values:
                         - 'sigmoid': Sigmoid function
                         - 'tanh': Hyperbolic tangent
                         - 'relu': Rectified Linear Unit (slope applied only if leaky=True)
                         - 'leakyrelu' / 'leaky_relu': Leaky ReLU, implies leaky=True
        negative_slope (float): Slope for negative inputs, ReLU only
        leaky (bool): Apply the slope for negative inputs, ReLU only

    Returns:
        Activation: Immutable activation variant

    Raises:
        InvalidConfiguration: If name is not a supported activation or the slope is not finite

    Example:
        act = get_activation("RELU", negative_slope=0.5)
        act.mode  # 'RELU'
    """
    if isinstance(name, ActivationKind):
        name = name.value
    if not isinstance(name, str):
        raise InvalidConfiguration(f"Unsupported activation: {name!r}")

    key = name.strip().lower()
    if key == "sigmoid":
        return Sigmoid()
    elif key == "tanh":
        return Tanh()
    elif key == "relu":
        return LeakyReLU(negative_slope=float(negative_slope), leaky=leaky)
    elif key in ("leakyrelu", "leaky_relu"):
        return LeakyReLU(negative_slope=float(negative_slope), leaky=True)
    else:
        raise InvalidConfiguration(
            f"Unsupported activation: {name}. "
            f"Supported activations: sigmoid, tanh, relu, leakyrelu"
        )
