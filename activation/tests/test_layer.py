"""
Copyright (c) 2025. All rights reserved.
"""

"""
Tests for ActivationLayer: setup from LayerConf, phased forward/backward.
"""

import math
import os
import sys
import unittest

import numpy as np
import torch

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from activation.errors import InvalidConfiguration, LengthMismatch, PrecondMissingForward
from activation.layer import ActivationLayer, Phase
from devices.buffer import Buffer
from devices.device import CudaDevice, HostDevice
from lib.configs import LayerConf

TYPES = ["SIGMOID", "TANH", "RELU"]
NEG_SLOPE = 0.5


def make_conf(layer_type: str) -> LayerConf:
    conf = LayerConf(type=layer_type)
    if layer_type == "RELU":
        conf.mutable_relu_conf().negative_slope = NEG_SLOPE
    return conf


def reference_forward(mode: str, x: np.ndarray) -> np.ndarray:
    if mode == "SIGMOID":
        return 1.0 / (1.0 + np.exp(-x))
    elif mode == "TANH":
        return np.tanh(x)
    elif mode == "RELU":
        return np.where(x >= 0.0, x, 0.0)
    raise ValueError(f"Unknown activation: {mode}")


def reference_backward(mode: str, x: np.ndarray, y: np.ndarray, grad: np.ndarray) -> np.ndarray:
    if mode == "SIGMOID":
        return grad * y * (1.0 - y)
    elif mode == "TANH":
        return grad * (1.0 - y * y)
    elif mode == "RELU":
        return grad * (x > 0.0)
    raise ValueError(f"Unknown activation: {mode}")


class TestActivationLayerSetup(unittest.TestCase):
    """Test cases for layer setup"""

    def test_setup_relu(self):
        """Test RELU conf with slope 0.5"""
        layer = ActivationLayer()
        self.assertEqual(layer.layer_type, "Activation")
        layer.setup((3,), make_conf("RELU"))
        self.assertEqual(layer.mode, "RELU")
        self.assertEqual(layer.negative_slope, 0.5)
        self.assertEqual(layer.output_sample_shape, (3,))

    def test_setup_modes(self):
        """Test every type string maps to its mode"""
        for layer_type in TYPES:
            with self.subTest(type=layer_type):
                layer = ActivationLayer()
                layer.setup([4], make_conf(layer_type))
                self.assertEqual(layer.mode, layer_type)

    def test_negative_slope_without_relu(self):
        """Test non-ReLU layers report zero slope"""
        layer = ActivationLayer()
        layer.setup((2,), LayerConf(type="TANH"))
        self.assertEqual(layer.negative_slope, 0.0)

    def test_multi_dim_shape(self):
        """Test element count is the product of the sample shape"""
        layer = ActivationLayer()
        layer.setup((2, 3), LayerConf(type="SIGMOID"))
        self.assertEqual(len(layer.forward(Phase.TRAIN, Buffer.from_host(np.zeros(6)))), 6)
        with self.assertRaises(LengthMismatch):
            layer.forward(Phase.TRAIN, Buffer.from_host(np.zeros(5)))

    def test_unknown_type(self):
        """Test unknown types fail at setup"""
        with self.assertRaises(InvalidConfiguration):
            ActivationLayer().setup((3,), LayerConf(type="SOFTMAX"))

    def test_negative_dimension(self):
        """Test negative dimensions fail at setup"""
        with self.assertRaises(InvalidConfiguration):
            ActivationLayer().setup((-1,), LayerConf(type="TANH"))

    def test_not_set_up(self):
        """Test accessors before setup"""
        layer = ActivationLayer()
        with self.assertRaises(InvalidConfiguration):
            layer.mode
        with self.assertRaises(InvalidConfiguration):
            layer.output_sample_shape

    def test_unknown_backend(self):
        """Test unknown kernel backends fail at construction"""
        with self.assertRaises(InvalidConfiguration):
            ActivationLayer(backend="cudnn")


class TestActivationLayerPasses(unittest.TestCase):
    """Test cases for forward and backward across all modes"""

    def test_forward(self):
        """Test forward against host reference values"""
        x = np.array([1.0, 2.0, 3.0, -2.0, -3.0, -4.0], dtype=np.float32)
        for layer_type in TYPES:
            with self.subTest(type=layer_type):
                layer = ActivationLayer()
                layer.setup((x.size,), make_conf(layer_type))
                out = layer.forward(Phase.TRAIN, Buffer.from_host(x))
                self.assertEqual(len(out), x.size)
                y = reference_forward(layer.mode, x)
                for i in (0, 4, 5):
                    self.assertTrue(math.isclose(out[i], y[i], rel_tol=1e-6, abs_tol=1e-7))

    def test_backward(self):
        """Test backward against host reference values"""
        x = np.array([2.0, 3.0, 3.0, 7.0, 0.0, 5.0, 1.5, 2.5, -2.5, 1.5], dtype=np.float32)
        grad = np.array([2.0, 1.0, 2.0, 0.0, -2.0, -1.0, 1.5, 2.5, -1.5, -2.5], dtype=np.float32)
        for layer_type in TYPES:
            with self.subTest(type=layer_type):
                layer = ActivationLayer()
                layer.setup((x.size,), make_conf(layer_type))
                y = layer.forward(Phase.TRAIN, Buffer.from_host(x)).to_host()
                dx, param_grads = layer.backward(Phase.TRAIN, Buffer.from_host(grad))
                self.assertEqual(param_grads, [])
                expected = reference_backward(layer.mode, x, y, grad)
                np.testing.assert_allclose(dx.to_host(), expected, rtol=0, atol=1e-6)

    def test_eval_phase_does_not_cache(self):
        """Test backward after an eval-phase forward"""
        layer = ActivationLayer()
        layer.setup((2,), LayerConf(type="SIGMOID"))
        layer.forward(Phase.EVAL, Buffer.from_host([0.0, 1.0]))
        with self.assertRaises(PrecondMissingForward):
            layer.backward(Phase.TRAIN, Buffer.from_host([1.0, 1.0]))

    def test_eval_discards_earlier_train_cache(self):
        """Test backward after TRAIN then EVAL forwards cannot use the stale training input"""
        layer = ActivationLayer()
        layer.setup((2,), LayerConf(type="RELU"))
        layer.forward(Phase.TRAIN, Buffer.from_host([1.0, -1.0]))
        layer.forward(Phase.EVAL, Buffer.from_host([-1.0, 1.0]))
        with self.assertRaises(PrecondMissingForward):
            layer.backward(Phase.TRAIN, Buffer.from_host([3.0, 3.0]))

    def test_numpy_backend(self):
        """Test the layer runs on the numpy backend"""
        layer = ActivationLayer(backend="numpy")
        layer.setup((3,), LayerConf(type="TANH"))
        out = layer.forward(Phase.TRAIN, Buffer.from_host([0.0, 1.0, -1.0])).to_host()
        np.testing.assert_allclose(out, np.tanh([0.0, 1.0, -1.0]), rtol=1e-6, atol=1e-7)

    @unittest.skipUnless(torch.cuda.is_available(), "CUDA not available")
    def test_gpu_input_host_output(self):
        """Test a layer bound to the host accepts GPU inputs"""
        layer = ActivationLayer(device=HostDevice())
        layer.setup((3,), LayerConf(type="RELU"))
        out = layer.forward(Phase.TRAIN, Buffer.from_host([1.0, -1.0, 0.0], CudaDevice(0)))
        self.assertEqual(out.device, HostDevice())
        np.testing.assert_array_equal(out.to_host(), [1.0, 0.0, 0.0])


if __name__ == "__main__":
    unittest.main()
