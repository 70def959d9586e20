import os
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DB_DIR = os.getenv("SAKOON_DATA_DIR") or os.path.join(BASE_DIR, "db")
MEMORY_DIR = os.path.join(DB_DIR, "memory")
MEMORY_DB_PATH = os.path.join(MEMORY_DIR, "memories.db")
SESSIONS_DIR = os.path.join(DB_DIR, "sessions")

PROMPTS_DIR = os.path.join(BASE_DIR, "prompts")
DEFAULT_SYSTEM_PROMPT_PATH = os.path.join(PROMPTS_DIR, "companion_system_prompt.md")
