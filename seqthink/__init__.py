"""SeqThink MCP - sequential thinking, analysis frameworks and reasoning-thread scoring."""

__version__ = "1.0.0"
