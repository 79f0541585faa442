# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

import pytest
from unittest.mock import AsyncMock, MagicMock

from bridge_core.config import AnalysisSettings
from bridge_core.runtime_config import EngineRuntimeConfig
from bridge_core.schema.contact import Contact
from bridge_core.tools.fetch import FetchResponse


@pytest.fixture
def contact():
    return Contact(
        id="c-1",
        name="Jordan Example",
        headline="Partner at Blue Harbor Capital",
        location="Oslo, Norway",
        source="LinkedIn export",
        raw_text="Met at Maritime Forum 2025.",
    )


@pytest.fixture
def linkedin_contact():
    return Contact(
        id="c-2",
        name="Jordan Example",
        headline="Partner at Blue Harbor Capital",
        location="Oslo, Norway",
        source="https://www.linkedin.com/in/jordan-example",
    )


@pytest.fixture
def settings():
    return AnalysisSettings()


@pytest.fixture
def runtime_config():
    return EngineRuntimeConfig.default()


@pytest.fixture
def mock_chat():
    """Matches the ChatCapability protocol, returning AsyncMocks."""
    chat = MagicMock()
    chat.chat = AsyncMock(return_value="")
    return chat


@pytest.fixture
def mock_fetch():
    """Matches the FetchCapability protocol; every URL is reachable."""
    fetch = MagicMock()
    fetch.fetch = AsyncMock(return_value=FetchResponse(ok=True, status=200))
    return fetch
