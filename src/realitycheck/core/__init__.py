"""Core library for Reality Check: persistence, synthesis and orchestration."""
