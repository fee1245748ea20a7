"""
Test cases for landmark backend selection and fallback.
"""
import unittest

from gesturecode.backend import BackendUnavailableError, backend_order, create_backend
from gesturecode.config import load_config
from gesturecode.types import HandLandmarkBackend

from tests.fixtures import FakeBackend


def failing(error):
    def factory(cfg):
        raise error
    return factory


class TestCreateBackend(unittest.TestCase):

    def setUp(self):
        self.cfg = load_config()
        self.cfg.backend.preferred = "primary"
        self.cfg.backend.fallbacks = ["secondary", "tertiary"]
        self.built = []

    def succeeding(self, name):
        def factory(cfg):
            self.built.append(name)
            return FakeBackend(max_hands=cfg.backend.max_hands)
        return factory

    def test_preferred_backend(self):
        factories = {
            "primary": self.succeeding("primary"),
            "secondary": self.succeeding("secondary"),
            "tertiary": self.succeeding("tertiary"),
        }
        backend = create_backend(self.cfg, factories)
        self.assertIsInstance(backend, HandLandmarkBackend)
        self.assertEqual(self.built, ["primary"])

    def test_falls_back_in_order(self):
        factories = {
            "primary": failing(ImportError("No module named 'mediapipe'")),
            "secondary": failing(RuntimeError("model_not_found")),
            "tertiary": self.succeeding("tertiary"),
        }
        with self.assertLogs("gesturecode.backend", level="WARNING") as logs:
            create_backend(self.cfg, factories)
        self.assertEqual(self.built, ["tertiary"])
        warnings = [r for r in logs.records if r.levelname == "WARNING"]
        self.assertEqual(len(warnings), 2)
        self.assertEqual([r.args[0] for r in warnings], ["primary", "secondary"])
        self.assertIn("secondary", warnings[1].getMessage())

    def test_all_backends_fail(self):
        factories = {
            "primary": failing(RuntimeError("a")),
            "secondary": failing(RuntimeError("b")),
            "tertiary": failing(RuntimeError("c")),
        }
        with self.assertRaises(BackendUnavailableError) as ctx:
            create_backend(self.cfg, factories)
        self.assertEqual(list(ctx.exception.attempts), ["primary", "secondary", "tertiary"])

    def test_unknown_backend_name(self):
        with self.assertRaises(ValueError):
            create_backend(self.cfg, {"primary": self.succeeding("primary")})

    def test_order_drops_duplicates(self):
        self.cfg.backend.fallbacks = ["primary", "secondary", "secondary"]
        self.assertEqual(backend_order(self.cfg), ["primary", "secondary"])

    def test_default_order(self):
        self.assertEqual(backend_order(load_config()), ["mediapipe_tasks", "mediapipe_solutions"])


if __name__ == '__main__':
    unittest.main()
