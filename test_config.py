import json
import logging
import os
import shutil
import tempfile
import unittest

from tbx_core.config_runtime import RuntimeConfig, PathResolver
from tbx_core.errors import RetrievalError
from tbx_core.logging_monitoring import StructuredFormatter, timed


class TestRuntimeConfig(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        RuntimeConfig.reset()

    def tearDown(self):
        RuntimeConfig.reset()
        shutil.rmtree(self.tmp_dir)

    def test_01_defaults(self):
        config = RuntimeConfig(base_dir=self.tmp_dir)
        self.assertEqual(config.get_setting("search", "page_size"), 20)
        self.assertEqual(config.get_setting("corpus", "progress_interval"), 500)
        self.assertEqual(config.get_setting("collocations", "measure"), "pmi")
        self.assertEqual(sorted(config.get_split_sources()), ["dev", "test", "train"])

    def test_02_singleton(self):
        self.assertIs(RuntimeConfig(base_dir=self.tmp_dir), RuntimeConfig())

    def test_03_settings_file(self):
        path = os.path.join(self.tmp_dir, "settings.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({
                "corpus": {"splits": {"train": "corpus/train.conllu", "web": "https://example.org/x.conllu"}},
                "ngrams": {"n": 3},
            }, f)

        config = RuntimeConfig(base_dir=self.tmp_dir, config_file=path)
        sources = config.get_split_sources()
        self.assertEqual(sources["train"], os.path.join(self.tmp_dir, "corpus", "train.conllu"))
        self.assertEqual(sources["web"], "https://example.org/x.conllu")
        self.assertEqual(config.get_setting("ngrams", "n"), 3)
        self.assertEqual(config.get_setting("corpus", "fetch_timeout"), 60)

    def test_04_invalid_file_falls_back(self):
        path = os.path.join(self.tmp_dir, "settings.json")
        with open(path, "w", encoding="utf-8") as f:
            f.write("{not json")
        config = RuntimeConfig(base_dir=self.tmp_dir, config_file=path)
        self.assertEqual(config.get_setting("server", "port"), 8000)

    def test_05_save_settings(self):
        path = os.path.join(self.tmp_dir, "config", "settings.json")
        config = RuntimeConfig(base_dir=self.tmp_dir, config_file=path)
        config.set_setting("search", "page_size", 50)
        config.save_settings()

        with open(path, encoding="utf-8") as f:
            self.assertEqual(json.load(f)["search"]["page_size"], 50)

    def test_07_partial_section_keeps_defaults(self):
        """Keys missing from a configured section keep their defaults"""
        path = os.path.join(self.tmp_dir, "settings.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"search": {"page_size": 50}, "server": {"port": 9000}}, f)

        config = RuntimeConfig(base_dir=self.tmp_dir, config_file=path)
        self.assertEqual(config.get_setting("search", "page_size"), 50)
        self.assertEqual(config.get_setting("search", "len_min"), 1)
        self.assertEqual(config.get_setting("search", "len_max"), 9999)
        self.assertEqual(config.get_setting("server", "port"), 9000)
        self.assertEqual(config.get_setting("server", "host"), "127.0.0.1")

    def test_06_path_resolver(self):
        resolver = PathResolver(self.tmp_dir)
        self.assertEqual(str(resolver.data_dir), os.path.join(self.tmp_dir, "data"))
        self.assertEqual(str(resolver.resolve("/abs/path")), "/abs/path")


class TestErrorsAndLogging(unittest.TestCase):
    def test_01_retrieval_error_message(self):
        error = RetrievalError("dev", "https://host/dev.conllu", "404 Not Found")
        self.assertEqual(
            str(error),
            "Failed to retrieve split 'dev' from https://host/dev.conllu: 404 Not Found"
        )
        self.assertEqual(error.to_dict()["split"], "dev")

    def test_02_timed_logs_duration(self):
        logger = logging.getLogger("tbx.test.timed")
        with self.assertLogs(logger, level="DEBUG") as captured:
            with timed(logger, "work", items=3):
                pass
        self.assertIn("Starting: work", captured.output[0])
        self.assertTrue(hasattr(captured.records[-1], "duration_ms"))
        self.assertEqual(captured.records[-1].context, {"items": 3})

    def test_03_timed_reraises(self):
        logger = logging.getLogger("tbx.test.timed")
        with self.assertLogs(logger, level="ERROR"):
            with self.assertRaises(KeyError):
                with timed(logger, "fail"):
                    raise KeyError("x")

    def test_04_structured_formatter(self):
        record = logging.LogRecord("tbx", logging.INFO, __file__, 1, "hello", None, None)
        record.duration_ms = 2.5
        data = json.loads(StructuredFormatter().format(record))
        self.assertEqual(data["message"], "hello")
        self.assertEqual(data["duration_ms"], 2.5)


if __name__ == "__main__":
    unittest.main()
