from __future__ import annotations

import pytest

from core.templates import (
    DEFAULT_CHANNELNAME_TEMPLATE,
    DEFAULT_DISPLAYNAME_TEMPLATE,
    DEFAULT_USERNAME_TEMPLATE,
    CompiledTemplates,
    compile_templates,
)


@pytest.fixture
def templates() -> CompiledTemplates:
    return compile_templates(
        DEFAULT_USERNAME_TEMPLATE,
        DEFAULT_DISPLAYNAME_TEMPLATE,
        DEFAULT_CHANNELNAME_TEMPLATE,
    )
