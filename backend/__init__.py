"""SkillMount portal backend."""
