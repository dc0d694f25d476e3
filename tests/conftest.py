from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.component_builder import ComponentBuilder, FakeGit

from findref.logging import CORE_LOGGERS, get_logger


@pytest.fixture(autouse=True)
def _reset_findref_logger() -> Iterator[None]:
    """Drop handlers installed by ``main`` so later tests never write to a closed capture stream."""
    yield
    logger = logging.getLogger("findref")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    for name in CORE_LOGGERS:
        get_logger(name).setLevel(logging.NOTSET)


@pytest.fixture
def component_builder(tmp_path: Path) -> ComponentBuilder:
    """Provide a component tree rooted at the pytest tmp_path."""
    return ComponentBuilder(tmp_path)


@pytest.fixture
def fake_git(component_builder: ComponentBuilder) -> FakeGit:
    """Git stub whose repository toplevel is the component tree root."""
    return FakeGit(component_builder.path().resolve())
