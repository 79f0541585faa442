# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

import os


def is_local_run() -> bool:
    """Best-effort detection of local/dev runs from BRIDGE_ENV / ENV."""
    env = (os.getenv("BRIDGE_ENV") or os.getenv("ENV") or "").strip().lower()
    return env in ("local", "dev", "development", "test")
