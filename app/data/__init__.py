# __init__.py
from app.data.skill_tables import SkillTables, load_skill_tables

__all__ = [
    "SkillTables",
    "load_skill_tables",
]
