"""
Forward and backward passes of every activation on sample inputs.

Runs sigmoid, tanh and ReLU through ActivationOp on the requested device,
prints outputs and input gradients, and optionally writes activation
statistics and curve plots to TensorBoard.

Usage:
    python -m activation.main --device cpu --negative-slope 0.5 --log-dir logs
"""

import argparse
import logging
import os
import sys

import numpy as np

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from activation.monitor import ActivationMonitor
from activation.op import ActivationOp
from devices.buffer import Buffer
from devices.device import get_device
from lib.configs import ActivationConfig
from lib.logger import Logger
from lib.utils import plot_activation_curves

FORWARD_INPUT = [1.0, 2.0, 3.0, -2.0, -3.0, -4.0]
BACKWARD_INPUT = [2.0, 3.0, 3.0, 7.0, 0.0, 5.0, 1.5, 2.5, -2.5, 1.5]
BACKWARD_GRAD = [2.0, 1.0, 2.0, 0.0, -2.0, -1.0, 1.5, 2.5, -1.5, -2.5]


def run(config: ActivationConfig) -> dict:
    """Run forward on FORWARD_INPUT and backward on BACKWARD_INPUT/BACKWARD_GRAD.

    Returns:
        dict: host arrays keyed by "forward" and "backward"
    """
    device = get_device(config.device)
    activation = config.to_activation()

    logger = Logger(config.log_dir, run_name=activation.mode.lower()) if config.log_dir else None
    monitor = ActivationMonitor(logger, tag=activation.mode.lower()) if logger else None
    try:
        op = ActivationOp(activation, backend=config.backend, monitor=monitor)
        y = op.forward(Buffer.from_host(FORWARD_INPUT, device))

        op.forward(Buffer.from_host(BACKWARD_INPUT, device))
        dx = op.backward(Buffer.from_host(BACKWARD_GRAD, device))

        if logger is not None:
            plot_activation_curves(activation, logger, device=device, backend=config.backend)
    finally:
        if logger is not None:
            logger.close()

    return {"forward": y.to_host(), "backward": dx.to_host()}


def main() -> int:
    parser = argparse.ArgumentParser(description="Run activation forward/backward passes")
    parser.add_argument(
        "--activation",
        type=str,
        nargs="+",
        default=["sigmoid", "tanh", "relu"],
        help="Activations to run (sigmoid, tanh, relu, leakyrelu)",
    )
    parser.add_argument("--negative-slope", type=float, default=0.5, help="ReLU negative slope")
    parser.add_argument("--leaky", action="store_true", help="Apply the negative slope")
    parser.add_argument("--device", type=str, default="auto", help="cpu, cuda, cuda:N or auto")
    parser.add_argument("--backend", type=str, choices=["torch", "numpy"], default="torch")
    parser.add_argument("--log-dir", type=str, default=None, help="TensorBoard log directory")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    np.set_printoptions(precision=7, suppress=True)
    for name in args.activation:
        config = ActivationConfig(
            activation=name,
            negative_slope=args.negative_slope,
            leaky=args.leaky,
            backend=args.backend,
            device=args.device,
            log_dir=args.log_dir,
        )
        results = run(config)
        print(f"{name}")
        print(f"  forward x:   {np.array(FORWARD_INPUT, dtype=np.float32)}")
        print(f"  forward y:   {results['forward']}")
        print(f"  backward x:  {np.array(BACKWARD_INPUT, dtype=np.float32)}")
        print(f"  backward dy: {np.array(BACKWARD_GRAD, dtype=np.float32)}")
        print(f"  backward dx: {results['backward']}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
