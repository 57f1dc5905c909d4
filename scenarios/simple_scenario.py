from typing import Optional

import db
from db import EntityPermission


# (id, name, permission) for a fresh table: two player characters,
# a GM-owned NPC and one actor the current user can barely see.
SAMPLE_ENTITIES = [
    ("pc-archer", "Archer", EntityPermission.OWNER),
    ("pc-scout", "Scout", EntityPermission.OBSERVER),
    ("npc-guard", "Gate Guard", EntityPermission.OWNER),
    ("npc-stranger", "Hooded Stranger", EntityPermission.LIMITED),
]


def seed_entities(path: Optional[str] = None) -> int:
    """Insert the sample entities if the table is empty. Returns how many were added."""
    if db.count_entities(path) > 0:
        return 0
    for entity_id, name, perm in SAMPLE_ENTITIES:
        db.create_entity(entity_id, name, perm, path)
    return len(SAMPLE_ENTITIES)
