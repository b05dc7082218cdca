import pytest
from sqlalchemy.exc import OperationalError

from teachback.core.exceptions import PersistenceError
from teachback.repositories import PromptConfigRepository
from teachback.schemas.settings import (
    DEFAULT_DESCRIPTION,
    DEFAULT_HEADING,
    DEFAULT_PAGE_TITLE,
)
from teachback.services.prompt_config import PromptConfigService


@pytest.fixture
def repo(db_session):
    return PromptConfigRepository(db_session)


@pytest.fixture
def prompt_config_service(repo):
    return PromptConfigService(repo)


async def test_defaults_when_table_is_empty(prompt_config_service):
    configuration = await prompt_config_service.get_configuration()

    assert configuration.prompt == ""
    assert configuration.heading == DEFAULT_HEADING
    assert configuration.description == DEFAULT_DESCRIPTION
    assert configuration.page_title == DEFAULT_PAGE_TITLE


async def test_ensure_default_seeds_once(prompt_config_service, repo):
    await prompt_config_service.ensure_default()
    await prompt_config_service.ensure_default()

    assert await repo.count() == 1


async def test_partial_update_keeps_other_fields(prompt_config_service):
    await prompt_config_service.update_configuration({"prompt": "P1", "heading": "H1"})
    await prompt_config_service.update_configuration({"heading": "H2"})

    configuration = await prompt_config_service.get_configuration()
    assert configuration.prompt == "P1"
    assert configuration.heading == "H2"
    assert configuration.description == DEFAULT_DESCRIPTION


async def test_none_values_are_ignored(prompt_config_service):
    await prompt_config_service.update_configuration({"prompt": "P1"})
    await prompt_config_service.update_configuration({"prompt": None, "page_title": "Title"})

    configuration = await prompt_config_service.get_configuration()
    assert configuration.prompt == "P1"
    assert configuration.page_title == "Title"


async def test_empty_stored_values_resolve_to_defaults(prompt_config_service):
    await prompt_config_service.update_configuration({"heading": "", "description": ""})

    configuration = await prompt_config_service.get_configuration()
    assert configuration.heading == DEFAULT_HEADING
    assert configuration.description == DEFAULT_DESCRIPTION


async def test_update_modifies_latest_row_only(prompt_config_service, repo):
    await prompt_config_service.ensure_default()
    await prompt_config_service.update_configuration({"prompt": "P1"})

    assert await repo.count() == 1


async def test_read_failure_raises_persistence_error():
    class BrokenRepository:
        async def get_latest(self):
            raise OperationalError("SELECT", {}, Exception("database is down"))

    with pytest.raises(PersistenceError):
        await PromptConfigService(BrokenRepository()).get_configuration()


async def test_get_configuration_ends_read_transaction(prompt_config_service, db_session):
    await prompt_config_service.update_configuration({"prompt": "P1"})

    configuration = await prompt_config_service.get_configuration()

    assert configuration.prompt == "P1"
    assert not db_session.in_transaction()
