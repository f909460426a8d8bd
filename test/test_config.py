"""
Tests :mod:`config` module
Description: Assembling of the configuration from the action environment and TOML files
"""

import pytest
from dateutil.relativedelta import relativedelta

from actiontools.purge.config import load_config, DEFAULT_API_URL, DEFAULT_MAX_CONCURRENT_DELETIONS
from actiontools.purge.err import ConfigError
from actiontools.purge.model import Repository
from actiontools.purge.test.testutil import action_env, create_test_config


def test_defaults():
    config = load_config(action_env(), lookup=False)

    assert config.repo == Repository('octo', 'hello')
    assert config.age_delta == relativedelta(days=30)
    assert config.token == 'ghs_test'
    assert not config.skip_tags
    assert not config.simulate
    assert config.api_url == DEFAULT_API_URL
    assert config.max_concurrent_deletions == DEFAULT_MAX_CONCURRENT_DELETIONS


def test_inputs():
    env = action_env(skip_tags='yes', max_concurrency='3')
    env['GITHUB_API_URL'] = 'https://ghe.example.com/api/v3/'
    config = load_config(env, lookup=False)

    assert config.skip_tags
    assert config.max_concurrent_deletions == 3
    assert config.api_url == 'https://ghe.example.com/api/v3'


def test_underscore_input_variant():
    env = action_env()
    env['INPUT_SKIP_TAGS'] = 'true'
    assert load_config(env, lookup=False).skip_tags


def test_token_not_in_repr():
    assert 'ghs_test' not in repr(load_config(action_env(), lookup=False))


def test_missing_repository():
    env = action_env()
    del env['GITHUB_REPOSITORY']
    with pytest.raises(ConfigError, match='repository'):
        load_config(env, lookup=False)


@pytest.mark.parametrize('repository', ['octo', 'octo/', '/hello', 'octo/hello/extra'])
def test_invalid_repository(repository):
    with pytest.raises(ConfigError, match='repository'):
        load_config(action_env(repository=repository), lookup=False)


@pytest.mark.parametrize('age', [None, '', 'thirty days', '-5 days', '30 eons'])
def test_invalid_age(age):
    with pytest.raises(ConfigError, match='age'):
        load_config(action_env(age=age), lookup=False)


def test_invalid_bool():
    with pytest.raises(ConfigError, match='skip_tags'):
        load_config(action_env(skip_tags='sometimes'), lookup=False)


def test_token_required():
    with pytest.raises(ConfigError, match='token'):
        load_config(action_env(token=None), lookup=False)


def test_token_not_required_for_dry_run():
    config = load_config(action_env(token=None, dry_run='true'), lookup=False)
    assert config.simulate
    assert config.token is None


def test_dev_environment():
    env = {
        'PURGE_ENV': 'dev',
        'GITHUB_REPOSITORY': 'octo/hello',
        'AGE': '2 weeks',
        'SKIP_TAGS': 'on',
        'INPUT_AGE': '1 day',  # Ignored in dev
    }
    config = load_config(env, lookup=False)

    assert config.simulate
    assert config.skip_tags
    assert config.age == '2 weeks'
    assert config.token is None


def test_overrides():
    config = load_config(action_env(), lookup=False, simulate=True, skip_tags=None)
    assert config.simulate
    assert not config.skip_tags


def test_config_file(tmp_path):
    path = create_test_config({'repository': 'octo/file', 'age': '7 days', 'skip_tags': True, 'per_page': 50}, tmp_path)
    config = load_config({'INPUT_GITHUB_TOKEN': 't'}, path)

    assert str(config.repo) == 'octo/file'
    assert config.age_delta == relativedelta(days=7)
    assert config.skip_tags
    assert config.per_page == 50


def test_env_overrides_config_file(tmp_path):
    path = create_test_config({'repository': 'octo/file', 'age': '7 days'}, tmp_path)
    config = load_config(action_env(age='1 year'), path)

    assert str(config.repo) == 'octo/hello'
    assert config.age == '1 year'


def test_config_file_lookup(tmp_path, monkeypatch):
    create_test_config({'age': '3 days'}, tmp_path)
    monkeypatch.chdir(tmp_path)

    config = load_config(action_env(age=None))
    assert config.age == '3 days'


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(action_env(), tmp_path / 'missing.toml')


def test_invalid_config_file(tmp_path):
    path = tmp_path / 'purge.toml'
    path.write_text('[purge\nage = ')
    with pytest.raises(ConfigError):
        load_config(action_env(), path)


def test_negative_concurrency():
    with pytest.raises(ConfigError, match='max_concurrent_deletions'):
        load_config(action_env(max_concurrency='-1'), lookup=False)
