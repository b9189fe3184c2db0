import logging
import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

import logging_config


def test_configure_logging_once(monkeypatch, tmp_path):
    root = logging.getLogger()
    before = list(root.handlers)
    monkeypatch.setattr(logging_config, "LOG_DIR", tmp_path / "logs")
    monkeypatch.setattr(logging_config, "_LOG_CONFIGURED", False)
    try:
        log = logging_config.get_logger("poewatch.test", "debug")
        log.info("hello")
        logging_config.configure_logging()
        added = [h for h in root.handlers if h not in before]
        assert len(added) == 2
        assert (tmp_path / "logs" / logging_config.LOG_FILE).exists()
        stream = [h for h in added if not isinstance(h, logging.FileHandler)][0]
        assert stream.level == logging.DEBUG
    finally:
        for h in root.handlers[:]:
            if h not in before:
                root.removeHandler(h)
                h.close()
