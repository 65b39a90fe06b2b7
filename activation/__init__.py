"""
Copyright (c) 2025. All rights reserved.
"""

"""
Elementwise activations over device-resident buffers.

Modules: kinds, kernels, op, layer, monitor, errors
"""

from activation.errors import ActivationError, InvalidConfiguration, LengthMismatch, PrecondMissingForward
from activation.kinds import ActivationKind, LeakyReLU, Sigmoid, Tanh, get_activation
from activation.op import ActivationOp, OpState
