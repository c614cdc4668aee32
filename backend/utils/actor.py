from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ActorContext:
    """Who is performing a write, and for which tenant.

    Passed explicitly into every mutating call and used to fill the
    created_by/updated_by audit columns.
    """
    user_id: Optional[int]
    tenant_id: Optional[int] = None


# Writes performed by the scheduler and by startup seeding.
SYSTEM_ACTOR = ActorContext(user_id=None)
