"""
Shared utilities for the PowerFlex client.

This package contains functionality used by both the MGMT (REST) client and the
local SDC driver channel:
- errors: Typed error taxonomy raised by every public operation
- config: Environment-driven settings
- logging_config: Logging setup for applications embedding the client
- timing: Optional external time recorder hook
"""
