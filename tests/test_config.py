import logging

import pytest

from snowfactory import create_generator
from snowfactory import config as settings
from snowfactory.ids import IdGenerator
from snowfactory.utils.errors import ConfigurationError
from snowfactory.utils.logging import setup_logging


@pytest.fixture
def testing_env(monkeypatch):
    monkeypatch.setattr(settings.TestingConfig, "WORKER_ID", "42")
    monkeypatch.setattr(settings.TestingConfig, "SEQUENCE_BITS", "12")
    monkeypatch.setattr(settings.TestingConfig, "WORKER_BITS", "10")
    monkeypatch.setattr(settings.TestingConfig, "EPOCH_MILLIS", "1674635252000")
    return monkeypatch


def test_all_environments_are_registered():
    assert set(settings.config) == {"development", "production", "testing"}
    assert settings.config["production"].DEBUG is False
    assert settings.config["testing"].LOG_PATH == ""


def test_create_generator_reads_config(testing_env):
    generator = create_generator("testing")
    assert isinstance(generator, IdGenerator)
    assert generator.worker_id == 42
    assert generator.layout.timestamp_shift == 22
    assert generator.decode(generator.next_id()).worker_id == 42


def test_overrides_reach_the_generator(testing_env, clock):
    generator = create_generator("testing", epoch=0, clock=clock, sleeper=clock.sleep)
    assert generator.decode(generator.next_id()).timestamp == 1000


def test_unknown_environment(testing_env):
    with pytest.raises(ConfigurationError, match="staging"):
        create_generator("staging")


def test_non_numeric_worker_id(testing_env):
    testing_env.setattr(settings.TestingConfig, "WORKER_ID", "abc")
    with pytest.raises(ConfigurationError, match="WORKER_ID"):
        create_generator("testing")


def test_worker_id_out_of_range(testing_env):
    testing_env.setattr(settings.TestingConfig, "WORKER_ID", "1024")
    with pytest.raises(ConfigurationError):
        create_generator("testing")


def test_too_many_bits(testing_env):
    testing_env.setattr(settings.TestingConfig, "WORKER_BITS", "17")
    with pytest.raises(ConfigurationError):
        create_generator("testing")


def test_setup_logging_writes_a_file(tmp_path):
    logger = logging.getLogger("snowfactory.test_setup")
    log_path = tmp_path / "logs" / "snowfactory.log"
    setup_logging(logger, debug=True, log_path=str(log_path))
    try:
        logger.info("hello")
        assert log_path.exists()
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
    finally:
        for handler in logger.handlers:
            handler.close()
        logger.handlers = []


def test_setup_logging_console_only():
    logger = logging.getLogger("snowfactory.test_console")
    setup_logging(logger, debug=False, log_path="")
    assert logger.level == logging.INFO
    assert [type(h) for h in logger.handlers] == [logging.StreamHandler]
    logger.handlers = []


def test_setup_logging_closes_replaced_handlers(tmp_path):
    logger = logging.getLogger("snowfactory.test_reset")
    setup_logging(logger, debug=True, log_path=str(tmp_path / "first.log"))
    old_file = next(h for h in logger.handlers if isinstance(h, logging.FileHandler))
    try:
        setup_logging(logger, debug=True, log_path=str(tmp_path / "second.log"))
        assert old_file.stream is None
        assert old_file not in logger.handlers
    finally:
        for handler in logger.handlers:
            handler.close()
        logger.handlers = []
