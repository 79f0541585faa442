# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of Bridge Engine.
#
# Bridge Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Bridge CLI Module

Commands:
- run <contacts_file>: Enrich contacts and print results JSON
- gate <evidence_file>: Evaluate the evidence gate offline
- settings: Show effective settings

Usage:
    bridge-cli run contacts.json --mode fast
    bridge-cli gate evidence.json --settings-file settings.json
"""

from bridge_cli.enrich_cmd import main

__all__ = ["main"]

if __name__ == "__main__":
    main()
