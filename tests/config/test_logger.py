import pytest

from medspa_seeder.config.logger import LOG_NAMESPACE, configure_logging, logger
from medspa_seeder.config.settings import LoggingSettings, StorageSettings
from medspa_seeder.storage.local import LocalStorage


@pytest.fixture
def file_logging(tmp_path):
    log_path = tmp_path / "logs" / "seeder.log"
    logger.enable(LOG_NAMESPACE)
    configure_logging(
        LoggingSettings(level="DEBUG", console=False, enable_file=True, filepath=log_path)
    )
    yield log_path
    configure_logging()


def test_file_sink_keeps_only_seeder_records(tmp_path, file_logging):
    LocalStorage(StorageSettings(dir=tmp_path / "storage")).set_value("INPUT", {})
    logger.info("outside the seeder package")
    logger.complete()

    text = file_logging.read_text(encoding="utf-8")
    assert "medspa_seeder.storage.local:set_value" in text
    assert "Saving" in text
    assert "outside the seeder package" not in text


def test_disabled_namespace_writes_nothing(tmp_path, file_logging):
    logger.disable(LOG_NAMESPACE)
    try:
        LocalStorage(StorageSettings(dir=tmp_path / "storage")).set_value("INPUT", {})
        logger.complete()
    finally:
        logger.enable(LOG_NAMESPACE)

    assert not file_logging.exists() or "Saving" not in file_logging.read_text(
        encoding="utf-8"
    )
