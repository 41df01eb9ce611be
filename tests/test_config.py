import pathlib
import tempfile
import unittest

from vibeview.config import VibeViewConfig, config_from_mapping, load_config
from vibeview.config.runtime import DATA_ROOT_ENV, default_dataset_root


class VibeViewConfigTest(unittest.TestCase):
    def test_defaults(self):
        cfg = VibeViewConfig()
        self.assertEqual(cfg.chunk_size, 100_000)
        self.assertEqual(cfg.sampling_rate_hz, 25_600.0)
        self.assertEqual(cfg.max_fft_bins, 4096)
        self.assertIsNone(cfg.display_threshold)
        self.assertIsNone(cfg.base_url)
        self.assertIsNone(cfg.http_timeout_s)

    def test_mapping_flattens_ingest_block_and_ignores_unknown_keys(self):
        payload = {
            "ingest": {"chunk_size": 5000, "yield_every": 2},
            "display_threshold": 800,
            "theme": "dark",
        }
        cfg = config_from_mapping(payload)
        self.assertEqual(cfg.chunk_size, 5000)
        self.assertEqual(cfg.yield_every, 2)
        self.assertEqual(cfg.display_threshold, 800)

    def test_sanitized_clamps_values(self):
        cfg = VibeViewConfig(
            chunk_size=0,
            yield_every=-4,
            max_fft_bins=0,
            channel_size=0,
            base_url="  ",
            dataset_root="~/captures",
        ).sanitized()
        self.assertEqual(cfg.chunk_size, 1)
        self.assertEqual(cfg.yield_every, 1)
        self.assertEqual(cfg.max_fft_bins, 1)
        self.assertEqual(cfg.channel_size, 1)
        self.assertIsNone(cfg.base_url)
        self.assertIsInstance(cfg.dataset_root, pathlib.Path)
        self.assertNotIn("~", str(cfg.dataset_root))

    def test_missing_file_falls_back_to_defaults(self):
        cfg = load_config("/nonexistent/vibeview.yaml")
        self.assertEqual(cfg.chunk_size, VibeViewConfig().chunk_size)
        self.assertEqual(load_config(None).max_fft_bins, 4096)

    def test_load_yaml_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "vibeview.yaml"
            path.write_text(
                "base_url: http://server/vibrationjson\n"
                "ingest:\n"
                "  sampling_rate_hz: 12800\n",
                encoding="utf-8",
            )

            cfg = load_config(path)

            self.assertEqual(cfg.base_url, "http://server/vibrationjson")
            self.assertEqual(cfg.sampling_rate_hz, 12800.0)

    def test_non_mapping_yaml_is_rejected(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "vibeview.yaml"
            path.write_text("- 1\n- 2\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config(path)


def test_data_root_env_override(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv(DATA_ROOT_ENV, str(tmp_path))
    assert default_dataset_root() == tmp_path
    assert VibeViewConfig().dataset_root == tmp_path


if __name__ == "__main__":
    unittest.main()
