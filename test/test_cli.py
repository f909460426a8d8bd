import logging
from datetime import timedelta

import pytest

from actiontools.purge import cli, run
from actiontools.purge.test.client import FakeGitHubClient, fake_artifact, TAGS, DELETE
from actiontools.purge.test.testutil import action_env
from actiontools.purge.util.log import ROOT_LOGGER


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake(monkeypatch, tmp_path):
    client = (FakeGitHubClient()
              .add_run(1, fake_artifact(1, age=timedelta(days=40)), head_sha='release')
              .add_run(2, fake_artifact(2, age=timedelta(days=40)), fake_artifact(3, age=timedelta(days=1))))
    monkeypatch.setattr(cli, 'run', lambda config: run(config, client))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path))
    monkeypatch.setenv('XDG_CONFIG_DIRS', str(tmp_path))
    return client


def test_success(fake):
    assert cli.main([], action_env()) == cli.EXIT_OK
    assert sorted(fake.deleted) == [1, 2]


def test_dry_run(fake):
    assert cli.main(['--dry-run'], action_env(token=None)) == cli.EXIT_OK
    assert fake.calls[DELETE] == 0


def test_skip_tags(fake):
    fake.add_tag('v1', 'release')
    assert cli.main([], action_env(skip_tags='true')) == cli.EXIT_OK
    assert fake.deleted == [2]


def test_config_error(fake):
    assert cli.main([], action_env(age='old')) == cli.EXIT_FAILED
    assert fake.calls[DELETE] == 0


def test_fatal_fetch_error(fake):
    fake.fail_list.add(TAGS)
    assert cli.main([], action_env(skip_tags='true')) == cli.EXIT_FAILED


def test_isolated_failure_still_succeeds(fake):
    fake.fail_delete_ids.add(2)
    assert cli.main([], action_env()) == cli.EXIT_OK
    assert fake.deleted == [1]


def test_config_file_option(fake, tmp_path):
    path = tmp_path / 'custom.toml'
    path.write_text('[purge]\nrepository = "octo/hello"\nage = "30 days"\n')
    assert cli.main(['--config', str(path), '--dry-run'], {}) == cli.EXIT_OK


def test_debug_logs_every_result(fake, capsys):
    assert cli.main(['--log-level', 'debug'], action_env()) == cli.EXIT_OK

    err = capsys.readouterr().err
    assert "[deletion_result] {'artifact_id': 1, 'run_id': 1, 'outcome': 'DELETED'}" in err
    assert "[deletion_result] {'artifact_id': 2, 'run_id': 2, 'outcome': 'DELETED'}" in err
