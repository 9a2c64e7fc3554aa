import copy
import functools
import unittest

import numpy as np

from models.SAE.layers import SparseBiasLayer, layer_traits
from models.SAE.optimizer import RMSPropOptimizer, SGDOptimizer
from models.SAE.helpers.OptimizerHandle import OptimizerHandle
from models.SAE.helpers.errors import (
    InvalidConfigurationError,
    OwnershipViolationError,
    ShapeMismatchError,
)


class FixedInitialization:
    def __init__(self, values):
        self.values = values
        self.calls = []

    def initialize(self, rows, cols, dtype=None):
        self.calls.append((rows, cols))
        return np.asarray(self.values, dtype=dtype).reshape(rows, cols)


class CountingOptimizer(SGDOptimizer):
    def __init__(self, layer, **kwargs):
        super().__init__(layer, **kwargs)
        self.release_count = 0

    def release(self):
        super().release()
        self.release_count += 1


class TestSparseBiasLayerConstruction(unittest.TestCase):
    def test_defaults(self):
        layer = SparseBiasLayer(4, 10)
        self.assertEqual(layer.out_size, 4)
        self.assertEqual(layer.sample_size, 10)
        self.assertEqual(layer.weights.shape, (4, 1))
        np.testing.assert_array_equal(layer.weights, np.zeros((4, 1)))
        self.assertIsInstance(layer.optimizer, RMSPropOptimizer)
        self.assertTrue(layer.owns_optimizer)
        self.assertIs(layer.optimizer.layer, layer)
        for buf in (layer.grad, layer.delta, layer.input_parameter, layer.output_parameter):
            self.assertEqual(buf.shape, (0, 0))

    def test_init_rule_called_once_with_column_shape(self):
        rule = FixedInitialization([1.0, 2.0, 3.0])
        layer = SparseBiasLayer(3, 2, weight_init_rule=rule)
        self.assertEqual(rule.calls, [(3, 1)])
        np.testing.assert_array_equal(layer.weights, [[1.0], [2.0], [3.0]])

    def test_optimizer_factory(self):
        layer = SparseBiasLayer(2, 1, optimizer=functools.partial(SGDOptimizer, lr=0.5))
        self.assertIsInstance(layer.optimizer, SGDOptimizer)
        self.assertEqual(layer.optimizer.lr, 0.5)

    def test_invalid_sizes(self):
        for out_size, sample_size in [(0, 1), (1, 0), (-2, 3), (3, -1), (2.5, 1), (True, 1)]:
            with self.subTest(out_size=out_size, sample_size=sample_size):
                with self.assertRaises(InvalidConfigurationError):
                    SparseBiasLayer(out_size, sample_size)

    def test_init_rule_wrong_shape(self):
        class RowVectorInitialization:
            def initialize(self, rows, cols, dtype=None):
                return np.zeros((cols, rows), dtype=dtype)

        with self.assertRaises(InvalidConfigurationError):
            SparseBiasLayer(3, 1, weight_init_rule=RowVectorInitialization())

    def test_traits(self):
        traits = layer_traits(SparseBiasLayer)
        self.assertTrue(traits.is_bias_layer)
        self.assertTrue(traits.is_connection)
        self.assertFalse(traits.is_binary)
        self.assertFalse(traits.is_output_layer)
        self.assertFalse(traits.is_lstm_layer)
        self.assertIs(layer_traits(SparseBiasLayer(1, 1)), traits)


class TestSparseBiasLayerNumerics(unittest.TestCase):
    def setUp(self):
        self.layer = SparseBiasLayer(
            3, 2, weight_init_rule=FixedInitialization([1.0, 2.0, 3.0])
        )

    def test_forward_adds_bias_to_every_column(self):
        out = self.layer.forward(np.zeros((3, 2), dtype=np.float32))
        np.testing.assert_allclose(out, [[1, 1], [2, 2], [3, 3]])

    def test_forward_any_number_of_columns(self):
        x = np.arange(15, dtype=np.float32).reshape(3, 5)
        out = self.layer.forward(x)
        for j in range(5):
            np.testing.assert_allclose(out[:, j], x[:, j] + self.layer.weights[:, 0])

    def test_forward_is_pure_and_repeatable(self):
        x = np.random.randn(3, 4).astype(np.float32)
        first = self.layer.forward(x)
        second = self.layer.forward(x)
        np.testing.assert_array_equal(first, second)
        np.testing.assert_array_equal(self.layer.weights, [[1.0], [2.0], [3.0]])
        self.assertEqual(self.layer.output_parameter.shape, (0, 0))

    def test_forward_row_mismatch(self):
        layer = SparseBiasLayer(2, 1)
        with self.assertRaises(ShapeMismatchError):
            layer.forward(np.zeros((3, 4)))

    def test_forward_rejects_1d(self):
        with self.assertRaises(ShapeMismatchError):
            self.layer.forward(np.zeros(3))

    def test_backward_passes_error_through(self):
        gy = np.ones((3, 2), dtype=np.float32)
        for x in (np.zeros((3, 2)), np.full((3, 2), 7.0)):
            g = self.layer.backward(x, gy)
            self.assertIs(g, gy)
            self.assertEqual(g.shape, gy.shape)

    def test_backward_row_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            self.layer.backward(np.zeros((3, 2)), np.ones((4, 2)))

    def test_gradient_divides_by_sample_size(self):
        d = np.array([[2, 4], [2, 4], [2, 4]], dtype=np.float32)
        g = self.layer.gradient(d)
        self.assertEqual(g.shape, (3, 1))
        np.testing.assert_allclose(g, [[3], [3], [3]])
        self.assertIs(self.layer.grad, g)

    def test_gradient_ignores_column_count(self):
        # 4 columns but sample_size=2: sum / 2, not a column mean
        d = np.ones((3, 4), dtype=np.float32)
        np.testing.assert_allclose(self.layer.gradient(d), np.full((3, 1), 2.0))

    def test_gradient_row_mismatch(self):
        with self.assertRaises(ShapeMismatchError):
            self.layer.gradient(np.ones((2, 2)))

    def test_accessors_replace_buffers(self):
        self.layer.weights = np.array([[5.0], [6.0], [7.0]], dtype=np.float32)
        self.layer.delta = np.ones((3, 2))
        self.layer.input_parameter = np.zeros((3, 2))
        self.layer.output_parameter = np.zeros((3, 2))
        self.layer.grad = np.zeros((3, 1))
        out = self.layer.forward(np.zeros((3, 1), dtype=np.float32))
        np.testing.assert_allclose(out, [[5.0], [6.0], [7.0]])
        self.assertEqual(self.layer.delta.shape, (3, 2))
        self.assertEqual(self.layer.params()[0].shape, (3, 1))
        self.assertIs(self.layer.grads()[0], self.layer.grad)

    def test_weights_setter_accepts_flat_vector(self):
        layer = SparseBiasLayer(3, 1)
        layer.weights = [1.0, 2.0, 3.0]
        self.assertEqual(layer.weights.shape, (3, 1))
        out = layer.forward(np.zeros((3, 3), dtype=np.float32))
        np.testing.assert_allclose(out, [[1, 1, 1], [2, 2, 2], [3, 3, 3]])

    def test_weights_setter_rejects_wrong_shape(self):
        layer = SparseBiasLayer(3, 1)
        for bad in ([1.0, 2.0], np.ones((1, 3)), np.ones((3, 2))):
            with self.subTest(shape=np.shape(bad)):
                with self.assertRaises(ShapeMismatchError):
                    layer.weights = bad
        np.testing.assert_array_equal(layer.weights, np.zeros((3, 1)))


class TestSparseBiasLayerOwnership(unittest.TestCase):
    def make(self):
        return SparseBiasLayer(
            3,
            2,
            weight_init_rule=FixedInitialization([1.0, 2.0, 3.0]),
            optimizer=CountingOptimizer,
        )

    def test_move_transfers_everything(self):
        a = self.make()
        opt = a.optimizer
        a.delta = np.ones((3, 2))
        x = np.random.randn(3, 2).astype(np.float32)
        d = np.random.randn(3, 2).astype(np.float32)
        expected_out = a.forward(x)
        expected_grad = a.gradient(d).copy()

        b = a.move()

        self.assertIs(b.optimizer, opt)
        self.assertTrue(b.owns_optimizer)
        self.assertIs(opt.layer, b)
        self.assertIsNone(a.optimizer)
        self.assertFalse(a.owns_optimizer)
        self.assertTrue(a.moved_from)
        self.assertEqual((b.out_size, b.sample_size), (3, 2))
        np.testing.assert_array_equal(b.forward(x), expected_out)
        np.testing.assert_array_equal(b.grad, expected_grad)
        np.testing.assert_array_equal(b.gradient(d), expected_grad)
        self.assertEqual(b.delta.shape, (3, 2))
        for buf in (a.weights, a.grad, a.delta, a.input_parameter, a.output_parameter):
            self.assertEqual(buf.size, 0)

    def test_moved_from_layer_refuses_work(self):
        a = self.make()
        a.move()
        with self.assertRaises(OwnershipViolationError):
            a.forward(np.zeros((3, 1)))
        with self.assertRaises(OwnershipViolationError):
            a.gradient(np.zeros((3, 1)))

    def test_closing_source_releases_nothing(self):
        a = self.make()
        opt = a.optimizer
        b = a.move()
        a.close()
        self.assertEqual(opt.release_count, 0)
        b.close()
        self.assertEqual(opt.release_count, 1)

    def test_repeated_moves_release_once(self):
        a = self.make()
        opt = a.optimizer
        chain = [a]
        for _ in range(5):
            chain.append(chain[-1].move())
        for layer in chain:
            layer.close()
        for layer in chain:
            layer.close()
        self.assertEqual(opt.release_count, 1)

    def test_garbage_collection_releases_owned_optimizer(self):
        a = self.make()
        opt = a.optimizer
        b = a.move()
        del a
        self.assertEqual(opt.release_count, 0)
        del b
        self.assertEqual(opt.release_count, 1)

    def test_take_releases_destination_optimizer(self):
        a = self.make()
        b = self.make()
        opt_a, opt_b = a.optimizer, b.optimizer
        b.take(a)
        self.assertEqual(opt_b.release_count, 1)
        self.assertIs(b.optimizer, opt_a)
        self.assertIs(opt_a.layer, b)
        b.close()
        self.assertEqual(opt_a.release_count, 1)

    def test_take_self_is_noop(self):
        a = self.make()
        opt = a.optimizer
        a.take(a)
        self.assertIs(a.optimizer, opt)
        self.assertFalse(a.moved_from)

    def test_context_manager_closes(self):
        with self.make() as layer:
            opt = layer.optimizer
        self.assertEqual(opt.release_count, 1)

    def test_copy_is_refused(self):
        layer = self.make()
        with self.assertRaises(TypeError):
            copy.copy(layer)
        with self.assertRaises(TypeError):
            copy.deepcopy(layer)

    def test_borrowed_optimizer_is_not_released(self):
        borrower = SparseBiasLayer(3, 2)
        own_default = borrower.optimizer
        shared = CountingOptimizer(borrower)
        keeper = OptimizerHandle.owned(shared)
        borrower.set_optimizer(shared, owned=False)
        self.assertTrue(own_default.released)
        self.assertFalse(borrower.owns_optimizer)
        self.assertIs(shared.layer, borrower)
        borrower.close()
        self.assertEqual(shared.release_count, 0)
        keeper.release()
        self.assertEqual(shared.release_count, 1)

    def test_optimizer_of_another_layer_is_refused(self):
        owner = self.make()
        other = self.make()
        shared = owner.optimizer
        kept = other.optimizer
        for owned in (False, True):
            with self.subTest(owned=owned):
                with self.assertRaises(OwnershipViolationError):
                    other.set_optimizer(shared, owned=owned)
        self.assertIs(other.optimizer, kept)
        self.assertTrue(other.owns_optimizer)
        self.assertIs(shared.layer, owner)
        self.assertTrue(owner.owns_optimizer)

        # the owner still trains its own weights
        owner.gradient(np.ones((3, 2), dtype=np.float32))
        other.gradient(np.full((3, 2), 100.0, dtype=np.float32))
        before = other.weights.copy()
        shared.step()
        np.testing.assert_allclose(owner.weights, [[0.99], [1.99], [2.99]], rtol=1e-6)
        np.testing.assert_array_equal(other.weights, before)

        owner.close()
        other.close()
        self.assertEqual(shared.release_count, 1)
        self.assertEqual(kept.release_count, 1)

    def test_second_owner_is_refused(self):
        layer = self.make()
        opt = CountingOptimizer(layer)
        keeper = OptimizerHandle.owned(opt)
        with self.assertRaises(OwnershipViolationError):
            layer.set_optimizer(opt, owned=True)
        with self.assertRaises(OwnershipViolationError):
            OptimizerHandle.owned(opt)
        self.assertTrue(keeper.owns)
        keeper.release()
        layer.close()
        self.assertEqual(opt.release_count, 1)

    def test_unowned_optimizer_can_be_adopted(self):
        layer = self.make()
        first = layer.optimizer
        opt = CountingOptimizer(layer)
        layer.set_optimizer(opt, owned=True)
        self.assertEqual(first.release_count, 1)
        self.assertTrue(layer.owns_optimizer)
        layer.close()
        self.assertEqual(opt.release_count, 1)

    def test_set_same_optimizer_changes_ownership_only(self):
        layer = self.make()
        opt = layer.optimizer
        layer.set_optimizer(opt, owned=False)
        self.assertEqual(opt.release_count, 0)
        self.assertFalse(layer.owns_optimizer)
        layer.close()
        self.assertEqual(opt.release_count, 0)


if __name__ == "__main__":
    unittest.main()
