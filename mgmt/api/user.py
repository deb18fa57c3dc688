from __future__ import annotations

from typing import TYPE_CHECKING, List

from mgmt.models import System, User
from shared.timing import time_spent

if TYPE_CHECKING:
    from mgmt.client import Client


class UserMixin:
    client: "Client"
    system: System

    def get_user(self) -> List[User]:
        with time_spent("get_user"):
            path = f"/api/instances/System::{self.system.id}/relationships/User"
            return self.client.execute("GET", path, result_type=List[User]) or []
